"""
HAProxy Stats Parser
Decodes the CSV export of the HAProxy stats page (``<base>/haproxy;csv``)
into StatRow records.
"""

import csv
import logging
from collections import OrderedDict
from typing import Dict, List, Union

from pydantic import ValidationError

from ..errors import DecodeError
from ..models.stats import EntryType, StatRow

logger = logging.getLogger(__name__)


class HAProxyStatsParser:
    """Parser for HAProxy stats CSV output"""

    def parse_csv_stats(self, csv_data: Union[bytes, str]) -> List[StatRow]:
        """
        Parse HAProxy stats CSV output

        CSV Format:
        # pxname,svname,qcur,qmax,scur,smax,slim,stot,bin,bout,dreq,dresp,ereq,econ,eresp,wretr,wredis,
        status,weight,act,bck,chkfail,chkdown,lastchg,downtime,qlimit,pid,iid,sid,throttle,lbtot,tracked,
        type,rate,rate_lim,rate_max,check_status,check_code,check_duration,hrsp_1xx,hrsp_2xx,hrsp_3xx,
        hrsp_4xx,hrsp_5xx,hrsp_other,hanafail,req_rate,req_rate_max,req_tot,cli_abrt,srv_abrt,comp_in,
        comp_out,comp_byp,comp_rsp,lastsess,last_chk,last_agt,qtime,ctime,rtime,ttime,...

        Columns are matched by header name, so newer HAProxy releases that
        append columns still decode. Any malformed line fails the whole
        document with DecodeError; nothing is retried or skipped.
        """
        text = self._to_text(csv_data)
        # Records end at \n only; free-text cells may hold \x0c or \u2028
        lines = [line.rstrip("\r") for line in text.split("\n")]
        lines = [line for line in lines if line.strip()]
        if not lines:
            raise DecodeError("empty stats document", raw=text)

        columns = self._parse_header(lines[0])

        rows = []
        for line_number, line in enumerate(lines[1:], start=2):
            values = self._split_line(line, line_number)
            if len(values) != len(columns):
                raise DecodeError(
                    f"line {line_number}: expected {len(columns)} fields, got {len(values)}",
                    raw=line
                )

            record = {name: value for name, value in zip(columns, values) if name}
            try:
                rows.append(StatRow.model_validate(record))
            except ValidationError as e:
                raise DecodeError(f"line {line_number}: {self._describe(e)}", raw=line) from e

        logger.debug(f"Decoded {len(rows)} stats rows ({len(columns)} columns)")
        return rows

    def group_by_type(self, rows: List[StatRow]) -> Dict[EntryType, List[StatRow]]:
        """Bucket rows by entry type, keeping their order inside each bucket"""
        grouped = OrderedDict((entry_type, []) for entry_type in EntryType)
        for row in rows:
            grouped[row.entry_type].append(row)
        return grouped

    def _to_text(self, csv_data: Union[bytes, str]) -> str:
        if isinstance(csv_data, str):
            return csv_data
        try:
            return csv_data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise DecodeError(f"stats document is not UTF-8: {e}",
                              raw=csv_data.decode('utf-8', 'replace')) from e

    def _parse_header(self, line: str) -> List[str]:
        # HAProxy prefixes the first column name with "# "
        if not line.lstrip().startswith('#'):
            logger.debug("Stats header has no '#' marker")

        names = [name.strip() for name in self._split_line(line, 1)]
        if names:
            names[0] = names[0].lstrip('#').strip()

        if not any(names):
            raise DecodeError("unparseable stats header", raw=line)
        return names

    def _split_line(self, line: str, line_number: int) -> List[str]:
        try:
            return next(csv.reader([line], strict=True))
        except csv.Error as e:
            raise DecodeError(f"line {line_number}: {e}", raw=line) from e

    def _describe(self, error: ValidationError) -> str:
        first = error.errors()[0]
        column = '.'.join(str(part) for part in first.get('loc', ()))
        return f"column '{column}': {first.get('msg')} (input {first.get('input')!r})"


haproxy_stats_parser = HAProxyStatsParser()
