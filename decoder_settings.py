# -*- coding: utf-8 -*-
# decoder_settings.py
#
# The Python script in this file holds the settings used when decoding
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
Settings for the Color Computer tape decoder.

A Color Computer writes a 1 as one cycle of 2400 Hz, and a 0 as one cycle of 1200 Hz. At 44.1 kHz, that is roughly
18 and 37 samples per cycle respectively. The Color Computer's 6-bit DAC, and the vagaries of decades-old tape, blur
these lengths considerably, so each bit is accepted over a range of cycle lengths. The defaults below were found to
work empirically, but they may need adjusting for individual recordings.
"""

from dataclasses import dataclass

from errors import SettingsError

# Largest value any cycle-length threshold may take
MAX_THRESHOLD = 10000


@dataclass(frozen=True)
class DecoderSettings:
    """
    Immutable settings passed to each stage of the decoder.
    """

    one_low: int = 18  # Shortest cycle (in samples) that counts as a 1
    one_high: int = 31  # Longest cycle (in samples) that counts as a 1
    zero_low: int = 31  # Shortest cycle (in samples) that counts as a 0
    zero_high: int = 1000  # Longest cycle (in samples) that counts as a 0
    max_line_length: int = 4096  # Size of the buffer used to assemble each BASIC line
    debug: bool = False  # Log a detailed trace of the decoding
    verbose: bool = False  # Log a summary of the blocks we found
    keep_going: bool = False  # Skip to the next program after a fatal decode error, rather than stopping

    def __post_init__(self):
        for name in ('one_low', 'one_high', 'zero_low', 'zero_high'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise SettingsError("Invalid value for {}: {!r}".format(name, value))
            if value < 0:
                raise SettingsError("Negative value for {}: {:d}".format(name, value))
            if value > MAX_THRESHOLD:
                raise SettingsError("Value too large for {}: {:d}".format(name, value))

        if self.max_line_length < 1:
            raise SettingsError("Line buffer must hold at least one byte")
