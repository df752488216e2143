# -*- coding: utf-8 -*-
# coco_block_parser.py
#
# The Python script in this file assembles the stream of bits recovered from a
# TRS-80 Color Computer cassette recording into bytes, and parses those bytes
# into the Namefile, Data and End of File blocks stored on the tape.
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
Assemble a stream of bits recovered from a Color Computer tape into bytes, and parse them into blocks.

Bits are stored on the tape least-significant bit first. Each new bit is shifted into the top of an 8-bit register,
so that once eight bits have arrived, the first of them sits in the least-significant position.

Until a sync byte ($3C) has been seen, we don't know where the byte boundaries fall, so the register is compared
against the sync byte after every single bit (a sliding window). Once synchronised, a byte is only complete after
every eighth bit. A block is then read field by field:

    block type, length, [name, file type, ASCII flag, gap flag, start address, load address | data], checksum, leader

An unrecognised block type, or a Namefile / End of File block with the wrong length, sends the parser back to
searching for a sync byte. A checksum mismatch is fatal.
"""

import logging

from enum import Enum
from typing import Optional

from constants import ascii, ascii_flag_names, block_type_names, file_type_names, gap_flag_names, \
    BLOCK_TYPE_EOF, BLOCK_TYPE_NAME, LOAD_ADDRESS_LENGTH, NAME_BLOCK_LENGTH, PROGRAM_NAME_LENGTH, START_ADDRESS_LENGTH, \
    SYNC_BYTE
from decoder_settings import DecoderSettings
from errors import BlockAllocationError, ChecksumError
from hex_dump import create_hex_dump


class BlockState(Enum):
    """
    States of the block parser. Each state names the next field the parser is waiting for.
    """

    NEED_LEAD_BYTE = "NeedLeadByte"
    NEED_SYNC_BYTE = "NeedSyncByte"
    NEED_BLOCK_TYPE = "NeedBlockType"
    NEED_LENGTH = "NeedLength"
    NEED_DATA = "NeedData"
    NEED_NAME = "NeedName"
    NEED_FILE_TYPE = "NeedFileType"
    NEED_ASCII_FLAG = "NeedAsciiFlag"
    NEED_GAP_FLAG = "NeedGapFlag"
    NEED_START_ADDR = "NeedStartAddr"
    NEED_LOAD_ADDR = "NeedLoadAddr"
    NEED_CHECKSUM = "NeedCksum"
    DONE = "Done"


class Block:
    """
    A single block read from the tape: either a Namefile block, a Data block, or an End of File block.
    """

    def __init__(self):
        self.reset()

    def reset(self):
        """
        Return this block to its initial state, ready to search for a sync byte.

        :return:
            None
        """

        self.state = BlockState.NEED_SYNC_BYTE
        self.block_type: Optional[int] = None  # Name, Data or EndOfFile; None until the type byte has been read
        self.length = 0  # Block length, as stated on the tape
        self.checksum = 0  # Running sum of the type, length and payload bytes, modulo 256
        self.recorded_checksum: Optional[int] = None  # Checksum byte as stated on the tape
        self.data: Optional[bytearray] = None  # Payload of a Data block

        # Fields only found in Namefile blocks
        self.program_name = bytearray()
        self.file_type = 0
        self.ascii_flag = 0
        self.gap_flag = 0
        self.start_address = bytearray()
        self.load_address = bytearray()

        # Decoding scratch data
        self.byte = 0  # Register we shift bits into
        self.bit_count = 0  # Number of bits shifted into the register since the last complete byte
        self.data_index = 0  # Number of payload bytes received

    @property
    def is_complete(self):
        return self.state == BlockState.DONE

    @property
    def type_name(self):
        if self.block_type is None:
            return "undetermined"
        return block_type_names[self.block_type]

    @property
    def name(self):
        """The program name in a Namefile block, as a string. The name ends at the first zero byte, if any."""
        name_bytes = bytes(self.program_name).split(b"\x00")[0]
        return "".join(ascii[byte] for byte in name_bytes)

    @property
    def start_address_value(self):
        """Machine-language start address (big-endian)."""
        return int.from_bytes(self.start_address, 'big')

    @property
    def load_address_value(self):
        """Machine-language load address."""
        return int.from_bytes(self.load_address, 'big')

    def __repr__(self):
        return "<Block {} length={:d} state={}>".format(self.type_name, self.length, self.state.value)


class CocoBlockParser:
    """
    Class which takes bits, one at a time, and assembles them into Color Computer tape blocks.
    """

    def __init__(self, settings: Optional[DecoderSettings] = None):
        """
        Assemble bits recovered from a Color Computer tape into blocks.

        :param settings:
            Decoder settings (only the debug flag is used here)
        :return:
        """

        self.settings = settings if settings is not None else DecoderSettings()

        # The block we are currently assembling. We start a new one whenever this is None.
        self.block: Optional[Block] = None

        # When True, the register is checked after every bit (we're searching for a sync byte). When False, only after
        # every eighth bit.
        self.sliding_window = True

    def reset(self):
        """
        Abandon any block in progress, and start searching for a sync byte again.

        :return:
            None
        """

        self.block = None
        self.sliding_window = True

    def feed_bit(self, bit: int):
        """
        Shift a single bit into the block being assembled.

        :param bit:
            The bit value, either 0 or 1
        :return:
            The completed Block, if this bit completed one, otherwise None
        """

        # Start a new block if we don't have one
        if self.block is None:
            self.block = Block()
            self.sliding_window = True

        block = self.block

        # Bits arrive least-significant first, so shift each one in from the top
        block.byte = (block.byte >> 1) | (0x80 if bit else 0)
        block.bit_count += 1

        # Only look at the register when we might have a complete byte
        if not (self.sliding_window or block.bit_count == 8):
            return None

        self._process_byte(block=block)

        if block.state != BlockState.DONE:
            return None

        # Hand the completed block to the caller; we start a new one with the next bit
        self.block = None
        return block

    def _set_state(self, block: Block, state: BlockState):
        block.state = state
        self.sliding_window = state == BlockState.NEED_SYNC_BYTE

    def _resync(self, block: Block, reason: str):
        """
        Abandon the block we are assembling, and go back to looking for a sync byte.
        """
        logging.debug("{}, resetting (type {}, length {:d})".format(reason, block.type_name, block.length))
        block.reset()
        self._set_state(block=block, state=BlockState.NEED_SYNC_BYTE)

    def _process_byte(self, block: Block):
        """
        Process the byte in the block's register, advancing the block through its states.

        :param block:
            The block being assembled
        :return:
            None
        """

        value = block.byte
        state = block.state

        if state == BlockState.NEED_SYNC_BYTE:
            # Keep sliding the window along until we see the sync byte
            if value != SYNC_BYTE:
                return
            logging.debug("Found sync byte: {:02X}".format(value))
            self._next_byte(block=block, state=BlockState.NEED_BLOCK_TYPE)
            return

        # All other states consume the byte in the register
        self._next_byte(block=block, state=state)

        if state == BlockState.NEED_BLOCK_TYPE:
            logging.debug("Found block type: {:02X}".format(value))
            if value not in block_type_names:
                self._resync(block=block, reason="Found bad block type {:02X}".format(value))
                return
            block.block_type = value
            block.checksum = value
            self._set_state(block=block, state=BlockState.NEED_LENGTH)

        elif state == BlockState.NEED_LENGTH:
            logging.debug("Found length: {:02X}".format(value))
            block.length = value
            self._add_to_checksum(block=block, value=value)
            if block.block_type == BLOCK_TYPE_NAME:
                if block.length != NAME_BLOCK_LENGTH:
                    self._resync(block=block, reason="Found bad Name block length {:02X}".format(value))
                else:
                    self._set_state(block=block, state=BlockState.NEED_NAME)
            elif block.block_type == BLOCK_TYPE_EOF:
                if block.length != 0:
                    self._resync(block=block, reason="Found bad EndOfFile block length {:02X}".format(value))
                else:
                    self._set_state(block=block, state=BlockState.NEED_CHECKSUM)
            else:
                try:
                    block.data = bytearray(block.length)
                except MemoryError:
                    raise BlockAllocationError("Data block allocation of {:d} bytes failed".format(block.length))
                block.data_index = 0
                # A zero-length data block has no payload to wait for
                if block.length == 0:
                    self._set_state(block=block, state=BlockState.NEED_CHECKSUM)
                else:
                    self._set_state(block=block, state=BlockState.NEED_DATA)

        elif state == BlockState.NEED_NAME:
            logging.debug("Found name byte: {:02X}".format(value))
            block.program_name.append(value)
            self._add_to_checksum(block=block, value=value)
            if len(block.program_name) == PROGRAM_NAME_LENGTH:
                logging.debug("Name: <{}>".format(block.name))
                self._set_state(block=block, state=BlockState.NEED_FILE_TYPE)

        elif state == BlockState.NEED_FILE_TYPE:
            logging.debug("Found file type: {:02X} ({})".format(value, file_type_names.get(value, "unknown")))
            block.file_type = value
            self._add_to_checksum(block=block, value=value)
            self._set_state(block=block, state=BlockState.NEED_ASCII_FLAG)

        elif state == BlockState.NEED_ASCII_FLAG:
            logging.debug("Found ASCII flag: {:02X} ({})".format(value, ascii_flag_names.get(value, "unknown")))
            block.ascii_flag = value
            self._add_to_checksum(block=block, value=value)
            self._set_state(block=block, state=BlockState.NEED_GAP_FLAG)

        elif state == BlockState.NEED_GAP_FLAG:
            logging.debug("Found gap flag: {:02X} ({})".format(value, gap_flag_names.get(value, "unknown")))
            block.gap_flag = value
            self._add_to_checksum(block=block, value=value)
            self._set_state(block=block, state=BlockState.NEED_START_ADDR)

        elif state == BlockState.NEED_START_ADDR:
            logging.debug("Found start address byte: {:02X}".format(value))
            block.start_address.append(value)
            self._add_to_checksum(block=block, value=value)
            if len(block.start_address) == START_ADDRESS_LENGTH:
                logging.debug("Machine language start: {:04X}".format(block.start_address_value))
                self._set_state(block=block, state=BlockState.NEED_LOAD_ADDR)

        elif state == BlockState.NEED_LOAD_ADDR:
            logging.debug("Found load address byte: {:02X}".format(value))
            block.load_address.append(value)
            self._add_to_checksum(block=block, value=value)
            # The length of a Namefile block is counted down while the load address arrives
            block.length = (block.length - 1) & 0xFF
            if len(block.load_address) == LOAD_ADDRESS_LENGTH:
                logging.debug("Machine language load: {:04X}".format(block.load_address_value))
                self._set_state(block=block, state=BlockState.NEED_CHECKSUM)

        elif state == BlockState.NEED_DATA:
            logging.debug("Found data: {:02X}".format(value))
            block.data[block.data_index] = value
            block.data_index += 1
            self._add_to_checksum(block=block, value=value)
            if block.data_index == block.length:
                if self.settings.debug:
                    logging.debug("Length: {:02X}\n{}".format(block.data_index, create_hex_dump(block.data)))
                self._set_state(block=block, state=BlockState.NEED_CHECKSUM)

        elif state == BlockState.NEED_CHECKSUM:
            logging.debug("Found checksum: {:02X}; computed {:02X}".format(value, block.checksum))
            block.recorded_checksum = value
            if value != block.checksum:
                raise ChecksumError(block_type=block.block_type,
                                    calculated_checksum=block.checksum,
                                    recorded_checksum=value)
            self._set_state(block=block, state=BlockState.NEED_LEAD_BYTE)

        elif state == BlockState.NEED_LEAD_BYTE:
            logging.debug("Found leader byte: {:02X}".format(value))
            self._set_state(block=block, state=BlockState.DONE)

        else:
            raise ValueError("Bad block state <{}>".format(state))

    def _next_byte(self, block: Block, state: BlockState):
        # Empty the register, ready to assemble the next byte
        block.byte = 0
        block.bit_count = 0
        self._set_state(block=block, state=state)

    @staticmethod
    def _add_to_checksum(block: Block, value: int):
        block.checksum = (block.checksum + value) & 0xFF
