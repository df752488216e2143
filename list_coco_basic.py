# -*- coding: utf-8 -*-
# list_coco_basic.py
#
# This Python script produces textual listings of tokenized BASIC programs
# recovered from TRS-80 Color Computer cassette tapes. It supports Color BASIC,
# Extended Color BASIC and the Disk BASIC extensions.
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
Produce textual listings of Color Computer BASIC programs, from the Data blocks of a tape.

The payloads of consecutive Data blocks are treated as one continuous stream, since BASIC lines may straddle block
boundaries. Each line is stored as:

    Offset  Size  Contents
    0       1     Data block number of the next line (block numbers seem to start at $1E)
    1       1     Offset of the next line within that block
    2       2     Line number (big-endian)
    4       n     Tokenized line, terminated by a zero byte

The next-line pointer is ignored: where it points seems to drift by one byte with each successive block. Instead we
simply search for the zero byte at the end of each line. A program ends with a run of zero bytes.

References:

TRS-80 Color Computer Technical Reference Manual (Radio Shack 26-3193)
Dragon User, December 1984
"""

import logging

from typing import Iterator, List, Optional, Sequence

from coco_block_parser import Block
from constants import BLOCK_TYPE_DATA, BLOCK_TYPE_NAME, FUNCTION_TOKEN_PREFIX, OPERATOR_TOKEN_END, \
    function_tokens, operator_tokens
from decoder_settings import DecoderSettings
from errors import BlockNumberError, LineTooLongError, TruncatedProgramError
from hex_dump import create_hex_dump


def detokenize(byte_list: Sequence[int]):
    """
    Render a tokenized line of Color BASIC as text.

    Printable ASCII characters are shown as they are, BASIC tokens are expanded into keywords, zero bytes are dropped,
    and all other bytes are shown as <\\xHH>.

    :param byte_list:
        The bytes of the tokenized line
    :return:
        string
    """

    output = ""
    position = 0
    stream_length = len(byte_list)

    while position < stream_length:
        current_byte = byte_list[position]

        # Printable ASCII
        if 0x20 <= current_byte <= 0x7E:
            output += chr(current_byte)
        # Operator tokens
        elif 0x80 <= current_byte < OPERATOR_TOKEN_END:
            output += operator_tokens[current_byte]
        # Function tokens are a two-byte sequence, $FF followed by the token
        elif current_byte == FUNCTION_TOKEN_PREFIX:
            position += 1
            if position < stream_length and byte_list[position] in function_tokens:
                output += function_tokens[byte_list[position]]
            else:
                output += "\\x{:02X}".format(current_byte)
                if position < stream_length:
                    output += "\\x{:02X}".format(byte_list[position])
        # Zero bytes are silently dropped; anything else is shown in hex
        elif current_byte != 0:
            output += "\\x{:02X}".format(current_byte)

        position += 1

    return output


def iter_listing_lines(block_list: List[Block], settings: Optional[DecoderSettings] = None) -> Iterator[str]:
    """
    Produce a text listing of the BASIC program stored in a sequence of tape blocks, one line at a time.

    :param block_list:
        The blocks of a single program, in the order they were found on the tape: usually a Namefile block, one or
        more Data blocks, and an End of File block.
    :param settings:
        Decoder settings (used for the maximum line length)
    :return:
        Iterator over lines of text, each ending with a newline
    """

    if settings is None:
        settings = DecoderSettings()

    # Show the program name, if this program starts with a Namefile block
    if len(block_list) > 0 and block_list[0].is_complete and block_list[0].block_type == BLOCK_TYPE_NAME:
        yield "Program: {:>8s}\n".format(block_list[0].name)

    # Collect the payloads of the run of Data blocks which starts with the first Data block
    payloads: List[bytearray] = []
    for block in block_list:
        if block.block_type == BLOCK_TYPE_DATA:
            payloads.append(block.data)
        elif len(payloads) > 0:
            break

    if len(payloads) == 0:
        return

    # Every line starts with the number of the block it's in, or the next one
    block_number = payloads[0][0] if len(payloads[0]) > 0 else 0
    logging.debug("Block {:d}".format(block_number))

    # Our position in the stream of data blocks
    block_index = 0
    position = 0

    def skip_exhausted_blocks():
        # Move on to the next data block when we reach the end of the current one
        nonlocal block_index, position, block_number
        while block_index < len(payloads) and position >= len(payloads[block_index]):
            block_index += 1
            position = 0
            block_number = (block_number + 1) & 0xFF

    def fetch_byte():
        if block_index >= len(payloads):
            raise TruncatedProgramError("Data blocks ended in the middle of a line")
        return payloads[block_index][position]

    def next_byte():
        nonlocal position
        position += 1
        skip_exhausted_blocks()

    skip_exhausted_blocks()

    while block_index < len(payloads):
        payload = payloads[block_index]

        # A run of zeros at the end of the block terminates the program. This may span data blocks, which we don't
        # check for.
        remaining = payload[position:]
        if len(remaining) in (2, 3) and not any(remaining):
            return

        # Check the line starts with the current block number
        line_start = payload[position]
        if line_start != block_number and line_start != (block_number + 1) & 0xFF:
            logging.debug("Bad line start in block:\n{}".format(create_hex_dump(payload)))
            raise BlockNumberError(found=line_start, expected=block_number, offset=position)
        next_byte()

        # Skip the next-line offset
        next_byte()

        # Read the line number
        line_number = fetch_byte() << 8
        next_byte()
        line_number |= fetch_byte()
        next_byte()

        # Copy the line, which may span data blocks
        line = bytearray()
        while fetch_byte() != 0:
            line.append(fetch_byte())
            next_byte()
            if len(line) >= settings.max_line_length:
                raise LineTooLongError(length=len(line), max_length=settings.max_line_length)

        # Skip the zero byte at the end of the line
        next_byte()

        yield "{:5d} {}\n".format(line_number, detokenize(line))


def create_listing_from_blocks(block_list: List[Block], settings: Optional[DecoderSettings] = None):
    """
    Create a text listing of the BASIC program stored in a sequence of tape blocks.

    :param block_list:
        The blocks of a single program
    :param settings:
        Decoder settings
    :return:
        string
    """

    return "".join(iter_listing_lines(block_list=block_list, settings=settings))
