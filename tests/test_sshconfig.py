import pytest

from etshell.sshconfig import (
    ConfigOpcode,
    SshConfigParser,
    get_opcode,
    parse_ssh_config_file,
)
from etshell.sshoptions import SshOptions


def _options(host="myalias"):
    opts = SshOptions()
    opts.set_host(host)
    return opts


def _write(tmp_path, text, name="config"):
    path = tmp_path / name
    path.write_text(text)
    return path


@pytest.mark.parametrize(
    "keyword,opcode",
    [
        ("HostName", ConfigOpcode.HOSTNAME),
        ("host", ConfigOpcode.HOST),
        ("CONNECTTIMEOUT", ConfigOpcode.TIMEOUT),
        ("ProxyJump", ConfigOpcode.PROXYJUMP),
        ("bogus", ConfigOpcode.UNSUPPORTED),
    ],
)
def test_get_opcode(keyword, opcode):
    assert get_opcode(keyword) == opcode


def test_matching_host_block(tmp_path):
    path = _write(
        tmp_path,
        "Host other\n"
        "    HostName other.example.com\n"
        "    Port 1111\n"
        "Host myalias\n"
        "    HostName real.example.com\n"
        "    User bob\n"
        "    Port 2222\n"
        "    ProxyJump jump.example.com\n",
    )
    opts = _options()
    assert parse_ssh_config_file(opts, str(path)) is True
    assert opts.host == "real.example.com"
    assert opts.username == "bob"
    assert opts.port == 2222
    assert opts.proxy_jump == "jump.example.com"


def test_missing_file_leaves_options(tmp_path):
    opts = _options()
    assert parse_ssh_config_file(opts, str(tmp_path / "absent")) is False
    assert opts == _options()


def test_first_value_wins(tmp_path):
    path = _write(tmp_path, "ConnectTimeout 10\nConnectTimeout 20\n")
    opts = _options()
    parse_ssh_config_file(opts, path)
    assert opts.timeout == 10


def test_negated_pattern_excludes_host(tmp_path):
    path = _write(tmp_path, "Host * !myalias\n  User carol\n")
    opts = _options()
    parse_ssh_config_file(opts, path)
    assert opts.username is None


def test_wildcard_pattern_applies(tmp_path):
    path = _write(tmp_path, "Host my*\n  User carol\n")
    opts = _options()
    parse_ssh_config_file(opts, path)
    assert opts.username == "carol"


def test_host_match_ignores_case(tmp_path):
    path = _write(tmp_path, "Host MYALIAS\n  User carol\n")
    opts = _options("MyAlias")
    parse_ssh_config_file(opts, path)
    assert opts.username == "carol"


@pytest.mark.parametrize("value,ssh1,ssh2", [("2", 0, 1), ("1,2", 1, 1), ("1", 1, 0)])
def test_protocol(value, ssh1, ssh2):
    opts = _options()
    SshConfigParser(opts).parse_line(f"Protocol {value}\n")
    assert (opts.ssh1, opts.ssh2) == (ssh1, ssh2)


@pytest.mark.parametrize("value,expected", [("yes", 1), ("no", 0), ("YESPLEASE", 1), ("maybe", 0)])
def test_strict_host_key_checking(value, expected):
    opts = _options()
    SshConfigParser(opts).parse_line(f"StrictHostKeyChecking {value}\n")
    assert opts.strict_host_key_checking == expected


def test_proxy_command_takes_rest_of_line():
    opts = _options()
    SshConfigParser(opts).parse_line("ProxyCommand ssh -W %h:%p bastion\n")
    assert opts.proxy_command == "ssh -W %h:%p bastion"


def test_proxy_command_none():
    opts = _options()
    opts.proxy_command = "old"
    SshConfigParser(opts).parse_line("ProxyCommand none\n")
    assert opts.proxy_command is None


def test_quoted_value():
    opts = _options()
    SshConfigParser(opts).parse_line('User "dave"\n')
    assert opts.username == "dave"


def test_equals_separator():
    opts = _options()
    SshConfigParser(opts).parse_line("Port=2200\n")
    assert opts.port == 2200


def test_hostname_expands_escape():
    opts = _options()
    parser = SshConfigParser(opts)
    parser.parse_line("Host myalias\n")
    parser.parse_line("  HostName %h.internal\n")
    assert opts.host == "myalias.internal"


def test_comments_blank_and_unsupported_lines_ignored(tmp_path):
    path = _write(tmp_path, "# comment\n\n   \nForwardAgent yes\n  # indented\nUser frank\n")
    opts = _options()
    parse_ssh_config_file(opts, path)
    assert opts.username == "frank"
    assert opts.timeout == 0


def test_include_follows_file(tmp_path):
    included = _write(tmp_path, "User erin\n", name="included")
    main = _write(tmp_path, f"Include {included}\n")
    opts = _options()
    parse_ssh_config_file(opts, main)
    assert opts.username == "erin"


def test_include_skipped_outside_matching_block(tmp_path):
    included = _write(tmp_path, "User erin\n", name="included")
    main = _write(tmp_path, f"Host other\n  Include {included}\n")
    opts = _options()
    parse_ssh_config_file(opts, main)
    assert opts.username is None


def test_port_only_set_when_unset():
    opts = _options()
    opts.set_port(2022)
    SshConfigParser(opts).parse_line("Port 2200\n")
    assert opts.port == 2022


def test_parser_tracks_seen_keywords():
    opts = _options()
    parser = SshConfigParser(opts)
    parser.parse_line("ConnectTimeout 5\n")
    assert ConfigOpcode.TIMEOUT in parser.seen
    assert parser.parsing is True


def test_gssapi_lines():
    opts = _options()
    parser = SshConfigParser(opts)
    parser.parse_line("GSSAPIServerIdentity host/server\n")
    parser.parse_line("GSSAPIClientIdentity client\n")
    parser.parse_line("GSSAPIDelegateCredentials yes\n")
    assert opts.gss_server_identity == "host/server"
    assert opts.gss_client_identity == "client"
    assert opts.gss_delegate_creds == 1


def test_known_hosts_line():
    opts = _options()
    SshConfigParser(opts).parse_line("UserKnownHostsFile /srv/known\n")
    assert opts.knownhosts == "/srv/known"