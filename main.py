"""
Print INTEGERs in binary, like GNU printf(3) "%b".

    python main.py -w 12 -p 4 5 255
    python main.py --no-prefix 0x10
"""
import copy
import ctypes
import sys

from dryopt import *
from dryopt.decoding import decode_unsigned
from dryopt.faults import ERANGE


def binary(number, width, precision, prefix):
    """
    printf "%#*.*b": negative width left-justifies, negative precision is
    ignored, and the "0b" prefix only applies to nonzero numbers.
    """
    digits = format(number, "b")
    if precision == 0 and number == 0:
        digits = ""
    elif precision > 0:
        digits = digits.zfill(precision)
    if prefix and number:
        digits = "0b" + digits
    return digits.rjust(width) if width >= 0 else digits.ljust(-width)


def main(argv):
    width, precision, prefix = ctypes.c_int(0), ctypes.c_int(-1), ctypes.c_bool(True)

    options = (
        Signed("w", "width", width,
               "Minimum width of field, padded with spaces."
               " Signedness determines justification direction"),
        Signed("p", "precision", precision,
               "Minimum number of digits to appear, padded with"
               " leading zeroes if necessary. Negative values == 0"),
        declare(None, "prefix", prefix,
                "Print in printf(3) `alternate form' (typically"
                " with a `0b' prefix on nonzero output). Default: true"),
    )

    context = Context(
        usage="INTEGER...",
        extra="Print INTEGERs in binary, like GNU printf(3) \"%b\". See printf(3) for more\n"
              "information.\n\nOptions:",
    )

    arguments = argv[1 + parse(argv, options, context):]
    if not arguments:
        context.hook(context.prog, "not enough arguments\n")
        render_help(
            options,
            context.stderr,
            prog=context.prog,
            usage=context.usage,
            extra=context.extra,
            width=context.width,
        )
        return 1

    # number syntax errors are collected here instead of ending the program
    checker = copy.replace(context, policy=Policy.RAISE)
    status = 0
    for argument in arguments:
        try:
            decoded = decode_unsigned(argument, 0, checker)
        except InvalidArgumentError:
            problem = strerror(ERANGE)
        else:
            if decoded is not None and decoded.position == len(argument):
                context.stdout.print(
                    binary(decoded.value, width.value, precision.value, prefix.value),
                    markup=False,
                    highlight=False,
                    soft_wrap=True,
                )
                continue
            problem = "trailing junk after number"
        status = 1
        context.hook(context.prog, "%s: %s" % (argument, problem))

    return status


if __name__ == '__main__':
    sys.exit(main(sys.argv))
