from datetime import timedelta
from enum import IntEnum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

UINT64_MAX = 2 ** 64 - 1

# svname values marking aggregate rows rather than individual servers
SUMMARY_SERVICE_NAMES = ("FRONTEND", "BACKEND")


def _parse_uint64(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        if not (text.isascii() and text.isdigit()):
            raise ValueError(f"not an unsigned integer: {value!r}")
        number = int(text)
    else:
        raise ValueError(f"not an unsigned integer: {value!r}")
    if number < 0 or number > UINT64_MAX:
        raise ValueError(f"out of uint64 range: {value!r}")
    return number


def _parse_seconds(value: Any) -> timedelta:
    """Duration columns are whole seconds; empty means zero, -1 means never"""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        seconds = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return timedelta(0)
        digits = text[1:] if text.startswith('-') else text
        if not (digits.isascii() and digits.isdigit()):
            raise ValueError(f"not a duration in seconds: {value!r}")
        seconds = int(text)
    else:
        raise ValueError(f"not a duration in seconds: {value!r}")
    try:
        return timedelta(seconds=seconds)
    except OverflowError:
        raise ValueError(f"duration out of range: {value!r}")


Uint64 = Annotated[int, BeforeValidator(_parse_uint64)]
Seconds = Annotated[timedelta, BeforeValidator(_parse_seconds)]


class EntryType(IntEnum):
    FRONTEND = 0
    BACKEND = 1
    SERVER = 2
    SOCKET = 3


class StatRow(BaseModel):
    """One line of the HAProxy ``;csv`` stats export.

    Field aliases are the CSV column names (without the ``# `` marker HAProxy
    puts in front of the first one). Columns HAProxy does not send keep their
    zero value; columns this model does not know are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    backend_name: str = Field("", alias="pxname")
    service_name: str = Field("", alias="svname")
    queue_current: Uint64 = Field(0, alias="qcur")
    queue_max: Uint64 = Field(0, alias="qmax")
    sessions_current: Uint64 = Field(0, alias="scur")
    sessions_max: Uint64 = Field(0, alias="smax")
    session_limit: Uint64 = Field(0, alias="slim")
    sessions_total: Uint64 = Field(0, alias="stot")
    bytes_in: Uint64 = Field(0, alias="bin")
    bytes_out: Uint64 = Field(0, alias="bout")
    denied_requests: Uint64 = Field(0, alias="dreq")
    denied_responses: Uint64 = Field(0, alias="dresp")
    errors_requests: Uint64 = Field(0, alias="ereq")
    errors_connections: Uint64 = Field(0, alias="econ")
    errors_responses: Uint64 = Field(0, alias="eresp")
    warnings_retries: Uint64 = Field(0, alias="wretr")
    warnings_redispatches: Uint64 = Field(0, alias="wredis")
    status: str = Field("", alias="status")
    weight: Uint64 = Field(0, alias="weight")
    is_active: Uint64 = Field(0, alias="act")
    is_backup: Uint64 = Field(0, alias="bck")
    check_failed: Uint64 = Field(0, alias="chkfail")
    check_downed: Uint64 = Field(0, alias="chkdown")
    status_last_changed: Seconds = Field(timedelta(0), alias="lastchg")
    downtime: Seconds = Field(timedelta(0), alias="downtime")
    queue_limit: Uint64 = Field(0, alias="qlimit")
    process_id: Uint64 = Field(0, alias="pid")
    proxy_id: Uint64 = Field(0, alias="iid")
    service_id: Uint64 = Field(0, alias="sid")
    throttle: Uint64 = Field(0, alias="throttle")
    lb_total: Uint64 = Field(0, alias="lbtot")
    tracked: Uint64 = Field(0, alias="tracked")
    entry_type: EntryType = Field(EntryType.FRONTEND, alias="type")
    rate: Uint64 = Field(0, alias="rate")
    rate_limit: Uint64 = Field(0, alias="rate_lim")
    rate_max: Uint64 = Field(0, alias="rate_max")
    check_status: str = Field("", alias="check_status")
    check_code: str = Field("", alias="check_code")
    check_duration: Uint64 = Field(0, alias="check_duration")
    hrsp_1xx: Uint64 = Field(0, alias="hrsp_1xx")
    hrsp_2xx: Uint64 = Field(0, alias="hrsp_2xx")
    hrsp_3xx: Uint64 = Field(0, alias="hrsp_3xx")
    hrsp_4xx: Uint64 = Field(0, alias="hrsp_4xx")
    hrsp_5xx: Uint64 = Field(0, alias="hrsp_5xx")
    hrsp_other: Uint64 = Field(0, alias="hrsp_other")
    check_failed_details: Uint64 = Field(0, alias="hanafail")
    request_rate: Uint64 = Field(0, alias="req_rate")
    request_rate_max: Uint64 = Field(0, alias="req_rate_max")
    request_total: Uint64 = Field(0, alias="req_tot")
    client_aborts: Uint64 = Field(0, alias="cli_abrt")
    server_aborts: Uint64 = Field(0, alias="srv_abrt")
    compressed_bytes_in: Uint64 = Field(0, alias="comp_in")
    compressed_bytes_out: Uint64 = Field(0, alias="comp_out")
    compressed_bytes_bypassed: Uint64 = Field(0, alias="comp_byp")
    compressed_responses: Uint64 = Field(0, alias="comp_rsp")
    last_session: Seconds = Field(timedelta(0), alias="lastsess")
    last_check: str = Field("", alias="last_chk")
    last_agent_check: str = Field("", alias="last_agt")
    queue_time_avg: Uint64 = Field(0, alias="qtime")
    connect_time_avg: Uint64 = Field(0, alias="ctime")
    response_time_avg: Uint64 = Field(0, alias="rtime")
    total_time_avg: Uint64 = Field(0, alias="ttime")

    @field_validator("entry_type", mode="before")
    @classmethod
    def parse_entry_type(cls, v):
        # range is checked by the enum itself
        return _parse_uint64(v)

    @property
    def is_summary(self) -> bool:
        """FRONTEND/BACKEND aggregate rows, as opposed to a single server"""
        return self.service_name in SUMMARY_SERVICE_NAMES
