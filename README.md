# labkit

Tools for systems programming labs: inspectors for 32-bit integer and
single-precision float patterns, reference answers for a set of bit
puzzles, rotate and smooth image kernels with a benchmark driver, and a
tiny shell with job control.

## Inspecting 32-bit values

`labkit.show` parses values given in decimal, hex (`0x...`), octal
(leading `0`) or, for floats, as floating point text, and describes them.

    fshow 0x3f800000 1.5
    ishow -1 0x7fffffff

`fshow` prints the float value, its bit pattern with sign, exponent and
fraction fields, and whether it is normalized, denormalized, infinite or
not a number. `ishow` prints each value in hex, signed and unsigned
decimal. Both print a usage message when given no values.

From Python:

```python
from labkit.show import parse_number, describe_float, describe_int

bits = parse_number("1.5")          # 0x3fc00000
print(describe_float(bits))
print(describe_int(parse_number("-1", allow_float=False)))
```

## Reference answers for the bit puzzles

`labkit.reference` computes each puzzle's expected result with plain
arithmetic on 32-bit two's complement integers and single-precision
bit patterns: `bit_xor`, `tmin`, `is_tmax`, `all_odd_bits`, `negate`,
`is_ascii_digit`, `conditional`, `is_less_or_equal`, `logical_neg`,
`how_many_bits`, `float_scale2`, `float_float2int` and `float_power2`,
plus `u2f` and `f2u` to convert between floats and bit patterns.

```python
from labkit import reference

reference.how_many_bits(12)       # 5
reference.how_many_bits(-5)       # 4
reference.is_ascii_digit(0x35)    # 1
reference.float_power2(0)         # 0x3f800000
```

## Image kernels and the benchmark driver

`labkit.kernels` holds `rotate` (90 degrees counter-clockwise) and
`smooth` (average over each pixel's in-image neighbourhood) on flat
lists of `Pixel` values, with the naive versions they start from.
`labkit.clock` provides `CycleCounter` and `CompensatedCounter`, and
`labkit.fcyc` measures a function as the best of several converging
samples (`fcyc`, configured by `FcycConfig`).

`labkit.perfdriver` checks each registered kernel for correctness on an
odd-sized image and on each test size, then reports cycles per element
against the baseline and the geometric mean of the speedups:

    perfdriver -t

Options:

    -t         skip the team check
    -s <n>     seed for the random test images (default 1729)
    -g         check only rotate() and smooth(), print a one-line score
    -d <file>  write the registered kernel names to a file
    -f <file>  test only the kernels named in a file
    -q         quit after writing the dump file
    -h         print usage

Without `-t` the driver stops unless `labkit.kernels.team` has been
changed from its default. Timings come from a nanosecond clock, so the
"cycles" reported are clock units, not processor cycles.

## The shell

`tsh` reads command lines, runs programs in the foreground or, with a
trailing `&`, in the background, each in its own process group. Ctrl-C
and Ctrl-Z are passed on to the foreground job. Built-in commands:
`quit`, `jobs`, `bg <pid|%jid>` and `fg <pid|%jid>`.

    tsh -p

Options: `-h` help, `-v` verbose, `-p` no prompt. It needs a POSIX system.

`labkit.tsh` also exposes `parseline`, which splits a line into
arguments and reports whether it asks for the background, and the
`JobList` of `Job` entries the shell keeps.

## What is not included

The package does not check puzzle solutions: there is no command that
runs puzzle functions against `labkit.reference`. It has no cache
simulator or matrix-transpose tools, and it does not ship the small
sleep, interrupt and stop programs used to exercise the shell; drive
`tsh` with ordinary commands instead.