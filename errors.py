# -*- coding: utf-8 -*-
# errors.py
#
# The Python script in this file defines the exceptions raised while decoding
# TRS-80 Color Computer cassette recordings.
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
Exception hierarchy for the Color Computer tape decoder.

CocoTapeError (base)
├── WavFormatError - the audio file can't be read, or isn't 16-bit mono 44.1kHz PCM
├── SettingsError - a cycle-length threshold is out of bounds
└── DecodeError - fatal error while decoding the tape
    ├── ChecksumError - a block's checksum byte doesn't match its contents
    ├── BlockAllocationError - a block's payload buffer couldn't be allocated
    └── ReconstructionError - the BASIC program inside the data blocks is malformed
        ├── BlockNumberError - a line doesn't start with the expected block number
        ├── LineTooLongError - a line overflowed the line buffer
        └── TruncatedProgramError - the data blocks ran out in the middle of a line

Framing errors (a bad block type or length after a sync byte) are not exceptions: the block parser quietly goes back
to searching for a sync byte.
"""

from typing import Optional


class CocoTapeError(Exception):
    """
    Base exception for all errors raised by the tape decoder. Each carries the name of the pipeline stage that
    failed, so that the command line can report where decoding stopped.
    """

    stage = "decoder"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        return "[{}] {}".format(self.stage, self.message)


class WavFormatError(CocoTapeError):
    """The WAV file could not be opened, or is not in the only format we support."""

    stage = "wav reader"


class SettingsError(CocoTapeError, ValueError):
    """A decoder setting was outside its allowed range."""

    stage = "settings"


class DecodeError(CocoTapeError):
    """Base class for fatal errors encountered while decoding the tape."""

    stage = "decoder"


class ChecksumError(DecodeError):
    """
    The checksum byte at the end of a block didn't match the sum of the block type, length and payload bytes.
    """

    stage = "block parser"

    def __init__(self, block_type: int, calculated_checksum: int, recorded_checksum: int):
        self.block_type = block_type
        self.calculated_checksum = calculated_checksum
        self.recorded_checksum = recorded_checksum
        super().__init__("Checksum mismatch in block of type {:02X}: computed {:02X}; tape says {:02X}".format(
            block_type, calculated_checksum, recorded_checksum))


class BlockAllocationError(DecodeError):
    """The payload buffer for a data block could not be allocated."""

    stage = "block parser"


class ReconstructionError(DecodeError):
    """The tokenized BASIC program stored in the data blocks could not be listed."""

    stage = "program lister"

    # The lines of the program which were listed before the error
    partial_listing = ""


class BlockNumberError(ReconstructionError):
    """A BASIC line didn't start with the current (or next) data block number."""

    def __init__(self, found: int, expected: int, offset: int):
        self.found = found
        self.expected = expected
        self.offset = offset
        super().__init__("Bad start of line: {:02X} != {:02X} at offset {:02X}".format(found, expected, offset))


class LineTooLongError(ReconstructionError):
    """A BASIC line was longer than the line buffer."""

    def __init__(self, length: int, max_length: int):
        self.length = length
        self.max_length = max_length
        super().__init__("Line too big for buffer ({:d}>={:d})".format(length, max_length))


class TruncatedProgramError(ReconstructionError):
    """The data blocks ended partway through a BASIC line."""
