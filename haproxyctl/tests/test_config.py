"""
Tests for TOML config loading and credential resolution
"""
import pytest

from haproxyctl.config import load_config, load_endpoints
from haproxyctl.errors import ConfigError

FULL_CONFIG = """
default_username = "admin"
default_password = "secret"

[[load_balancers]]
name = "ny-lb01"
url = "http://ny-lb01.example.com:8080/"

[[load_balancers]]
name = "ny-lb02"
url = "http://ny-lb02.example.com:8080/"
username = "ops"

[[load_balancers]]
name = "ny-lb03"
url = "https://ny-lb03.example.com/"
password = "other"

[[load_balancers]]
name = "ny-lb04"
url = "http://ny-lb04.example.com:8080/"
username = "ignored"
auth = "dXNlcjpwYXNz"
"""

LEGACY_CONFIG = """
DefaultUsername = "admin"
DefaultPassword = "secret"

[[LoadBalancers]]
Name = "ny-lb01"
Url = "http://ny-lb01.example.com:8080/"
Password = "override"
"""


class TestLoadEndpoints:

    def test_order_and_names(self, write_config):
        endpoints = load_endpoints(write_config(FULL_CONFIG))
        assert [endpoint.name for endpoint in endpoints] == ["ny-lb01", "ny-lb02", "ny-lb03", "ny-lb04"]

    def test_defaults_inherited(self, write_config):
        endpoint = load_endpoints(write_config(FULL_CONFIG))[0]
        assert (endpoint.username, endpoint.password) == ("admin", "secret")

    def test_override_field_by_field(self, write_config):
        endpoints = load_endpoints(write_config(FULL_CONFIG))

        assert (endpoints[1].username, endpoints[1].password) == ("ops", "secret")
        assert (endpoints[2].username, endpoints[2].password) == ("admin", "other")

    def test_auth_string_wins(self, write_config):
        endpoint = load_endpoints(write_config(FULL_CONFIG))[3]
        assert (endpoint.username, endpoint.password) == ("user", "pass")

    def test_legacy_keys(self, write_config):
        endpoints = load_endpoints(write_config(LEGACY_CONFIG))

        assert len(endpoints) == 1
        assert endpoints[0].url == "http://ny-lb01.example.com:8080/"
        assert (endpoints[0].username, endpoints[0].password) == ("admin", "override")

    def test_empty_path_means_no_endpoints(self):
        assert load_endpoints("") == []
        assert load_config(None).load_balancers == []

    def test_no_load_balancers(self, write_config):
        assert load_endpoints(write_config('default_username = "admin"\n')) == []


class TestConfigErrors:

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_endpoints(tmp_path / "nope.toml")

    def test_invalid_toml(self, write_config):
        with pytest.raises(ConfigError, match="invalid TOML"):
            load_endpoints(write_config("default_username = \n"))

    @pytest.mark.parametrize("url", ["ny-lb01:8080", "ftp://ny-lb01/", "http:///haproxy", ""])
    def test_bad_url(self, write_config, url):
        content = f'[[load_balancers]]\nname = "ny-lb01"\nurl = "{url}"\n'
        with pytest.raises(ConfigError, match="url"):
            load_endpoints(write_config(content))

    def test_missing_url(self, write_config):
        with pytest.raises(ConfigError):
            load_endpoints(write_config('[[load_balancers]]\nname = "ny-lb01"\n'))

    def test_empty_name(self, write_config):
        content = '[[load_balancers]]\nname = " "\nurl = "http://lb/"\n'
        with pytest.raises(ConfigError, match="name"):
            load_endpoints(write_config(content))

    def test_unknown_key(self, write_config):
        content = '[[load_balancers]]\nname = "lb"\nurl = "http://lb/"\nusrname = "typo"\n'
        with pytest.raises(ConfigError):
            load_endpoints(write_config(content))

    def test_bad_auth_string(self, write_config):
        content = '[[load_balancers]]\nname = "lb"\nurl = "http://lb/"\nauth = "dXNlcg=="\n'
        with pytest.raises(ConfigError, match="lb"):
            load_endpoints(write_config(content))

    def test_colon_in_username(self, write_config):
        content = 'default_username = "a:b"\n[[load_balancers]]\nname = "lb"\nurl = "http://lb/"\n'
        with pytest.raises(ConfigError):
            load_endpoints(write_config(content))
