# memori

An interactive memory scanner for Linux processes. You attach to a running
process and choose the integer type to look for. Then you narrow the
candidate addresses step by step with comparison filters.

memori reads `/proc/<pid>/cmdline`, `/proc/<pid>/maps` and `/proc/<pid>/mem`.
You need permission to read the target's memory. In practice that means
running as the same user with a permissive `ptrace_scope`, or running as root.

## Installation

```
pip install .
```

memori has no dependencies outside the standard library.

## Usage

Start the interactive shell:

```
memori
```

These commands can be typed at the prompt:

| Command | Aliases | Meaning |
|---|---|---|
| `process <PID>` | `proc` | attach to the process with that PID |
| `type <VAL_TYPE>` | `t` | start a fresh scan for `i8`, `u8`, `i16`, `u16`, `i32`, `u32`, `i64`, `u64`, `i128` or `u128` |
| `filter <OPERATOR> [OPERAND]` | `f` | scan memory, or narrow the earlier results |
| `print` | `p` | list the addresses found, each with the value it held when scanned and its current value |
| `exit` | `quit` | leave the shell |
| `help [command]` | | show the list of commands, or the usage of one command |

You must attach to a process before you choose a type, and choose a type
before you filter or print. The first `filter` after `type` reads every
readable memory region of the process. Each later `filter` only checks the
addresses that are still left.

The comparison operators are `<`, `<=`, `>`, `>=`, `==` and `!=`. Each takes
an operand, which must be a decimal number that fits the chosen type. The
operators can also be written as `less`, `less-equal`, `greater`,
`greater-equal`, `equal` and `not-equal`. Three more operators take no operand:

- `changed` keeps addresses whose current value differs from the value recorded for them.
- `not-changed` keeps addresses whose current value is the same as the recorded one.
- `unknown` keeps every address. On a first scan that means every readable address.

In `print` output, a current value that differs from the scanned one is shown in red.

A typical session:

```
memori λ process 4242
memori λ type i32
memori λ filter == 100
memori λ filter changed
memori λ print
```

While a scan runs, a small Game of Life animation is drawn together with the
percentage scanned. Ctrl-C or Ctrl-D at the prompt ends the session.

## What memori does not do

memori only reads memory. It never writes it. The commands `select`,
`unselect`, `set` and `freeze` are accepted by the command parser, but the
shell does not carry them out. It reports them as unsupported commands. So
memori cannot change a value in the target process, and it cannot hold a
value frozen.

## Library use

The building blocks can be used on their own:

- `memori.process.Process.open(pid)` returns a `Process` with `pid`, `command` and parsed `memory_maps`. It raises `OSError` if the process cannot be inspected.
- `memori.memory_map.MemoryMap.from_line(line)` parses one line of a maps listing.
- `memori.memory_reader.ValueType` lists the integer types. `ValueType.parse(text)` checks a literal against the type's range. `ValueType.decode(data)` decodes little-endian bytes.
- `memori.memory_reader.MemoryReader(pid)` reads values. Call `read(addr, value_type)` to get one. It is a context manager. Bytes that cannot be read count as zero.
- `memori.addresses.AddressSet(process, value_type)` holds the matching addresses. Its `scan(expr, report_progress)` method takes a `memori.addresses.ScanExpr`, for example `ScanExpr(ScanOp.EQUAL, "100")`. Its `addresses()`, `values()` and `rows()` methods return the results.
- `memori.commands.parse_command(line)` parses a line of the command language. It raises `CommandError` for invalid input and for help requests.
- `memori.util.print_addrs(addresses, out)` prints the results the way the shell does.