# etshell

Building blocks for a remote shell that survives dropped connections.
The package covers the pieces that sit around the network transport:

- **ssh config handling** (`etshell.sshoptions`, `etshell.sshconfig`,
  `etshell.matching`, `etshell.sshpaths`) — reads `~/.ssh/config`-style
  files the way an ssh client does: `Host` blocks with `*`/`?` wildcards
  and `!` negation, first value wins, `Include` of further files, and the
  `%d`, `%u`, `%l`, `%h`, `%r`, `%p` escapes and `~` in host names.
- **session bootstrap** (`etshell.sshsetup`) — starts the terminal process
  on the remote side through `ssh` (optionally via a jump host), hands it a
  freshly generated id and passkey, and checks that the remote side echoes
  them back.
- **tunnel specifications** (`etshell.tunnels`) — turns strings such as
  `10080:80,10443:443,10090-10092:8000-8002` into lists of
  `(source, destination)` port pairs.
- **terminals** (`etshell.console`, `etshell.userterminal`) — a raw-mode
  console for the local side and a pseudo terminal running the user's
  login shell for the remote side.
- **command-line helpers** (`etshell.cli`) — parsing `[user@]host[:port]`,
  choosing the user name and jump host, splitting `id/passkey` pairs and
  reading the server's INI configuration.

It needs only the standard library and runs on POSIX systems.

## Reading an ssh config

```python
from etshell.sshoptions import SshOptions
from etshell.sshconfig import parse_ssh_config_file

options = SshOptions()
options.set_host("myalias")
parse_ssh_config_file(options, "/home/me/.ssh/config")
parse_ssh_config_file(options, "/etc/ssh/ssh_config")
print(options.host, options.port, options.username, options.proxy_jump)
```

User settings are read first and the system file second; a keyword already
applied by an earlier matching block is kept. `parse_ssh_config_file`
returns `False` when the file cannot be opened, rather than raising.
Values in a config file that a setter rejects are skipped; called directly,
the `SshOptions.set_*` methods raise `OptionError` for invalid values.
For finer control, `SshConfigParser` parses single lines with
`parse_line` or whole files with `parse_file`.

Host patterns can be checked on their own:

```python
from etshell.matching import match_hostname

match_hostname("build01.example.com", "*.example.com,!gateway.example.com")
# MatchResult.POSITIVE
```

The result is a `MatchResult` (`NEGATIVE`, `NONE` or `POSITIVE`): a negated
pattern that matches wins over any positive match.

`etshell.sshpaths.expand_escape` expands `~` and `%` escapes on its own and
raises `PathExpansionError` for unknown escapes or users.

## Port tunnels

```python
from etshell.tunnels import parse_ranges_to_pairs

parse_ranges_to_pairs("10080:80,10090-10092:8000-8002")
# [(10080, 80), (10090, 8000), (10091, 8001), (10092, 8002)]
```

Ranges are inclusive. A range on one side only, ranges of different
lengths, or ports that do not start with a number raise `TunnelSpecError`.

## Starting a remote session

```python
from etshell.sshsetup import setup_ssh

pair = setup_ssh(
    "me", "server.example.com", "myalias", 2022,
    "", 2022, False, 0, "",
)
```

`setup_ssh` runs `ssh` to launch the remote terminal process and returns
the `id/passkey` string used to authenticate the session. If `ssh` cannot
be run or prints nothing, or the remote side does not answer with the same
id and passkey, `SshSetupError` is raised. The command sent to the remote
side comes from `gen_command`, and the reply is read with
`extract_idpasskey` (or `extract_jump_idpasskey` for the jump host).

## Terminals

`PseudoTerminalConsole` switches the local terminal to raw mode in `setup`,
restores it in `teardown`, and reports the window size as a
`TerminalInfo`. `PseudoUserTerminal.setup` forks a child on a new pseudo
terminal that runs `$SHELL --login` in the user's home directory;
`set_info` resizes it, `handle_session_end` waits for the shell and
returns its exit code, and `cleanup` closes the terminal.

## Command-line helpers

`etshell.cli` holds the pieces a client or server front end is made of:
`build_client_parser` (an `argparse` parser for the client's options),
`parse_destination`, `resolve_username`, `resolve_jumphost`,
`split_idpasskey`, `parse_terminal_handshake` and `load_server_config`,
which reads the `Networking`/`Port` and `Debug` (`verbose`, `silent`,
`logsize`) settings of the server's INI file into a `ServerSettings`.

## What this package does not do

There is no network transport here: no encrypted client/server
connection, no reconnection logic, no forwarding of tunnel traffic, and no
server that routes sessions to terminals. Accordingly the package installs
no commands; the helpers above are meant to be used from a front end that
provides those parts.