# constants.py
# -*- coding: utf-8 -*-
#
# The Python script in this file contains the TRS-80 Color Computer tape format
# constants, and Color BASIC lookup tables.
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
This file contains the constants which describe how the TRS-80 Color Computer stores files on tape, as well as the
BASIC tokens used by Color BASIC, Extended Color BASIC and Disk BASIC (RSDOS).

A Color Computer tape contains a leader of 128 bytes of $55, a Namefile block, a short gap, a second leader, one or
more Data blocks, and an End of File block. Every block is laid out as:

    leader byte ($55), sync byte ($3C), block type, block length, 0-255 data bytes, checksum, leader byte ($55)

The checksum is the sum (modulo 256) of the block type, block length and all the data bytes.

References:

TRS-80 Color Computer Technical Reference Manual (Radio Shack 26-3193)
Dragon User, December 1984
"""

# Framing bytes
SYNC_BYTE = 0x3C
LEADER_BYTE = 0x55

# Block types
BLOCK_TYPE_NAME = 0x00
BLOCK_TYPE_DATA = 0x01
BLOCK_TYPE_EOF = 0xFF

block_type_names = {
    BLOCK_TYPE_NAME: "Name",
    BLOCK_TYPE_DATA: "Data",
    BLOCK_TYPE_EOF: "EndOfFile"
}

# Fields of Namefile blocks
file_type_names = {
    0x00: "BASIC program",
    0x01: "Data file",
    0x02: "Machine language"
}

ascii_flag_names = {
    0x00: "binary",
    0xFF: "ASCII"
}

gap_flag_names = {
    0x00: "unknown",
    0x01: "continuous",
    0xFF: "gaps"
}

# Layout of the payload of a Namefile block
PROGRAM_NAME_LENGTH = 8
START_ADDRESS_LENGTH = 2
LOAD_ADDRESS_LENGTH = 2
NAME_BLOCK_LENGTH = 15

# Byte which precedes a function token
FUNCTION_TOKEN_PREFIX = 0xFF

# Operator tokens occupy bytes $80 up to (but excluding) this value
OPERATOR_TOKEN_END = 0xE0

# ASCII lookup table, with non-printable characters shown as dots
ascii = r"""................................ !"#$%&'()*+,-./0123456789:;<=>?""" \
        r"""@ABCDEFGHIJKLMNOPQRSTUVWXYZ[\]^_`abcdefghijklmnopqrstuvwxyz{|}~.""" \
        r"""................................................................""" \
        r"""................................................................"""

# Color BASIC operator tokens, with the Extended and Disk BASIC additions
operator_tokens = {
    # Color BASIC
    0x80: "FOR",
    0x81: "GO",
    0x82: "REM",
    0x83: "'",
    0x84: "ELSE",
    0x85: "IF",
    0x86: "DATA",
    0x87: "PRINT",
    0x88: "ON",
    0x89: "INPUT",
    0x8A: "END",
    0x8B: "NEXT",
    0x8C: "DIM",
    0x8D: "READ",
    0x8E: "RUN",
    0x8F: "RESTORE",
    0x90: "RETURN",
    0x91: "STOP",
    0x92: "POKE",
    0x93: "CONT",
    0x94: "LIST",
    0x95: "CLEAR",
    0x96: "NEW",
    0x97: "CLOAD",
    0x98: "CSAVE",
    0x99: "OPEN",
    0x9A: "CLOSE",
    0x9B: "LLIST",
    0x9C: "SET",
    0x9D: "RESET",
    0x9E: "CLS",
    0x9F: "MOTOR",
    0xA0: "SOUND",
    0xA1: "AUDIO",
    0xA2: "EXEC",
    0xA3: "SKIPF",
    0xA4: "TAB(",
    0xA5: "TO",
    0xA6: "SUB",
    0xA7: "THEN",
    0xA8: "NOT",
    0xA9: "STEP",
    0xAA: "OFF",
    0xAB: "+",
    0xAC: "-",
    0xAD: "*",
    0xAE: "/",
    0xAF: "^",
    0xB0: "AND",
    0xB1: "OR",
    0xB2: ">",
    0xB3: "=",
    0xB4: "<",
    # Extended Color BASIC
    0xB5: "DEL",
    0xB6: "EDIT",
    0xB7: "TRON",
    0xB8: "TROFF",
    0xB9: "DEF",
    0xBA: "LET",
    0xBB: "LINE",
    0xBC: "PCLS",
    0xBD: "PSET",
    0xBE: "PRESET",
    0xBF: "SCREEN",
    0xC0: "PCLEAR",
    0xC1: "COLOR",
    0xC2: "CIRCLE",
    0xC3: "PAINT",
    0xC4: "GET",
    0xC5: "PUT",
    0xC6: "DRAW",
    0xC7: "PCOPY",
    0xC8: "PMODE",
    0xC9: "PLAY",
    0xCA: "DLOAD",
    0xCB: "RENUM",
    0xCC: "FN",
    0xCD: "USING",
    # Disk BASIC
    0xCE: "DIR",
    0xCF: "DRIVE",
    0xD0: "FIELD",
    0xD1: "FILES",
    0xD2: "KILL",
    0xD3: "LOAD",
    0xD4: "LSET",
    0xD5: "MERGE",
    0xD6: "RENAME",
    0xD7: "RSET",
    0xD8: "SAVE",
    0xD9: "WRITE",
    0xDA: "VERIFY",
    0xDB: "UNLOAD",
    0xDC: "DSKINI",
    0xDD: "BACKUP",
    0xDE: "COPY",
    0xDF: "DSKI$",
    0xE0: "DSKO$"
}

# Color BASIC function tokens, which are preceded by a $FF byte
function_tokens = {
    # Color BASIC
    0x80: "SGN",
    0x81: "INT",
    0x82: "ABS",
    0x83: "USR",
    0x84: "RND",
    0x85: "SIN",
    0x86: "PEEK",
    0x87: "LEN",
    0x88: "STR$",
    0x89: "VAL",
    0x8A: "ASC",
    0x8B: "CHR$",
    0x8C: "EOF",
    0x8D: "JOYSTK",
    0x8E: "LEFT$",
    0x8F: "RIGHT$",
    0x90: "MID$",
    0x91: "POINT",
    0x92: "INKEY$",
    0x93: "MEM",
    # Extended Color BASIC
    0x94: "ATN",
    0x95: "COS",
    0x96: "TAN",
    0x97: "EXP",
    0x98: "FIX",
    0x99: "LOG",
    0x9A: "POS",
    0x9B: "SQR",
    0x9C: "HEX$",
    0x9D: "VARPTR",
    0x9E: "INSTR",
    0x9F: "TIMER",
    0xA0: "PPOINT",
    0xA1: "STRING$",
    # Disk BASIC
    0xA2: "CVN",
    0xA3: "FREE",
    0xA4: "LOC",
    0xA5: "LOF",
    0xA6: "MKN$"
}
