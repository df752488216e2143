# -*- coding: utf-8 -*-
# hex_dump.py
#
# The Python script in this file produces hexadecimal dumps of binary data,
# used when diagnosing problems decoding cassette tapes.
#
# Copyright (C) 2022-2024 Dominic Ford <https://dcford.org.uk/>
#
# This code is free software; you can redistribute it and/or modify it under
# the terms of the GNU General Public License as published by the Free Software
# Foundation; either version 3 of the License, or (at your option) any later
# version.
#
# You should have received a copy of the GNU General Public License along with
# this file; if not, write to the Free Software Foundation, Inc., 51 Franklin
# Street, Fifth Floor, Boston, MA  02110-1301, USA

# ----------------------------------------------------------------------------

"""
Produce hexadecimal dumps of binary data, with an ASCII column alongside. Runs of identical lines are collapsed into
a single line, followed by a count of how many times it was repeated.
"""

import argparse
import logging
import sys

from typing import Sequence

from constants import ascii

# Separator between the hex and ASCII columns
SEPARATOR = " |  "


def create_hex_dump(byte_list: Sequence[int], bytes_per_line: int = 16):
    """
    Create a hexadecimal dump of a string of bytes.

    :param byte_list:
        The bytes to dump
    :param bytes_per_line:
        The number of bytes to show on each line of output
    :return:
        string
    """

    output = ""
    previous_line = None
    repeat_count = 0

    for line_start in range(0, len(byte_list), bytes_per_line):
        line_bytes = byte_list[line_start:line_start + bytes_per_line]

        # Hex column, padded so the ASCII column lines up on a short final line
        hex_column = "".join("{:02X} ".format(byte) for byte in line_bytes)
        hex_column += " " * (3 * (bytes_per_line - len(line_bytes)))

        # ASCII column
        ascii_column = "".join(ascii[byte] for byte in line_bytes)

        line = hex_column + SEPARATOR + ascii_column

        # Don't print repeated lines, just count them
        if line == previous_line:
            repeat_count += 1
            continue

        if repeat_count:
            output += "    Last line repeated {:d} time(s)\n".format(repeat_count)

        output += "{:08x} {}\n".format(line_start, line)
        previous_line = line
        repeat_count = 0

    if repeat_count:
        output += "Line repeated {:d} time(s)\n".format(repeat_count)

    return output


# Do it right away if we're run as a script
if __name__ == "__main__":
    # Set up a logging object
    logging.basicConfig(level=logging.INFO,
                        stream=sys.stdout,
                        format='[%(asctime)s] %(levelname)s:%(filename)s:%(message)s',
                        datefmt='%d/%m/%Y %H:%M:%S')
    logger = logging.getLogger(__name__)
    logger.debug(__doc__.strip())

    # Read input parameters
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('--input',
                        required=True,
                        type=str,
                        dest="input",
                        help="The binary file to dump")
    args = parser.parse_args()

    # Read binary file
    with open(args.input, "rb") as f:
        file_bytes = f.read()

    # Output dump to stdout
    print(create_hex_dump(byte_list=file_bytes), end="")
