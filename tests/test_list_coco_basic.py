"""
BASIC Listing Unit Tests
========================

Tests for detokenizing Color BASIC lines, and for reassembling programs from the payloads of Data blocks.

Test Categories
---------------
1. Detokenizer: token tables, printable characters, escapes
2. Listing: program header, line layout, lines spanning blocks
3. Termination: the run of zero bytes at the end of a program
4. Errors: bad block numbers, overlong lines, truncated programs
"""

import pytest

from coco_block_parser import Block, BlockState
from constants import function_tokens, operator_tokens
from decoder_settings import DecoderSettings
from errors import BlockNumberError, LineTooLongError, ReconstructionError, TruncatedProgramError
from list_coco_basic import create_listing_from_blocks, detokenize, iter_listing_lines


def make_block(block_type: int, data=None, name: bytes = b"TEST    ") -> Block:
    """Build a completed block, as the block parser would produce."""
    block = Block()
    block.block_type = block_type
    block.state = BlockState.DONE
    if block_type == 0x00:
        block.length = 13
        block.program_name = bytearray(name)
    elif block_type == 0x01:
        block.data = bytearray(data)
        block.length = len(block.data)
    return block


def program_blocks(*payloads, with_name: bool = True):
    blocks = []
    if with_name:
        blocks.append(make_block(0x00))
    blocks.extend(make_block(0x01, data=payload) for payload in payloads)
    blocks.append(make_block(0xFF))
    return blocks


# =============================================================================
# Detokenizer Tests
# =============================================================================

class TestDetokenize:
    """Tests for rendering tokenized lines as text."""

    def test_printable_ascii(self):
        assert detokenize(b'A$="HI" ~') == 'A$="HI" ~'

    @pytest.mark.parametrize("token", range(0x80, 0xE0))
    def test_operator_tokens(self, token):
        assert detokenize([token]) == operator_tokens[token]

    @pytest.mark.parametrize("token", sorted(function_tokens))
    def test_function_tokens(self, token):
        assert detokenize([0xFF, token]) == function_tokens[token]

    def test_selected_keywords(self):
        assert detokenize([0x84]) == "ELSE"
        assert detokenize([0x81, 0xA5]) == "GOTO"
        assert detokenize([0xFF, 0x8B]) == "CHR$"
        assert detokenize([0xFF, 0xA6]) == "MKN$"
        assert detokenize([0xDF]) == "DSKI$"

    def test_table_sizes(self):
        assert len(operator_tokens) == 0xE1 - 0x80
        assert len(function_tokens) == 0xA7 - 0x80

    def test_zero_byte_suppressed(self):
        assert detokenize([0x00]) == ""
        assert detokenize([0x41, 0x00, 0x42]) == "AB"

    @pytest.mark.parametrize("value", [0x01, 0x0D, 0x1F, 0x7F, 0xE0, 0xFE])
    def test_hex_escape(self, value):
        assert detokenize([value]) == "\\x{:02X}".format(value)

    def test_hex_escape_is_uppercase(self):
        assert detokenize([0x1B]) == "\\x1B"

    def test_function_prefix_consumes_two_bytes(self):
        assert detokenize([0xFF, 0x80, 0x28]) == "SGN("

    def test_unknown_function_token(self):
        assert detokenize([0xFF, 0x20]) == "\\xFF\\x20"

    def test_function_prefix_at_end(self):
        assert detokenize([0x41, 0xFF]) == "A\\xFF"

    def test_mixed_line(self):
        line = [0x87, 0x20, 0x22, 0x48, 0x49, 0x22, 0x3A, 0x41, 0xB3, 0xFF, 0x86, 0x28, 0x31, 0x29]
        assert detokenize(line) == 'PRINT "HI":A=PEEK(1)'


# =============================================================================
# Listing Tests
# =============================================================================

class TestListing:
    """Tests for listing programs from Data block payloads."""

    def test_single_line(self):
        """Block number 30, skip byte, line number 100, ELSE, terminator."""
        blocks = program_blocks([0x1E, 0x00, 0x00, 0x64, 0x84, 0x00])
        listing = create_listing_from_blocks(blocks)
        assert listing == "Program: TEST    \n  100 ELSE\n"

    def test_no_name_block(self):
        blocks = program_blocks([0x1E, 0x00, 0x00, 0x64, 0x84, 0x00], with_name=False)
        assert create_listing_from_blocks(blocks) == "  100 ELSE\n"

    def test_name_block_only(self):
        assert create_listing_from_blocks([make_block(0x00)]) == "Program: TEST    \n"

    def test_short_name_right_justified(self):
        blocks = [make_block(0x00, name=b"AB\x00\x00\x00\x00\x00\x00")]
        assert create_listing_from_blocks(blocks) == "Program:       AB\n"

    def test_incomplete_name_block_ignored(self):
        block = make_block(0x00)
        block.state = BlockState.NEED_CHECKSUM
        assert create_listing_from_blocks([block]) == ""

    def test_empty_sequence(self):
        assert create_listing_from_blocks([]) == ""

    def test_line_number_is_big_endian(self):
        blocks = program_blocks([0x1E, 0x00, 0x01, 0x02, 0x41, 0x00])
        assert create_listing_from_blocks(blocks).splitlines()[-1] == "  258 A"

    def test_line_number_right_justified(self):
        blocks = program_blocks([0x1E, 0x00, 0xFF, 0xFF, 0x41, 0x00])
        assert create_listing_from_blocks(blocks).splitlines()[-1] == "65535 A"

    def test_several_lines(self):
        payload = [0x1E, 0x07, 0x00, 0x0A, 0x87, 0x00,
                   0x1E, 0x0E, 0x00, 0x14, 0x81, 0xA5, 0x31, 0x30, 0x00,
                   0x00, 0x00]
        listing = create_listing_from_blocks(program_blocks(payload, with_name=False))
        assert listing == "   10 PRINT\n   20 GOTO10\n"

    def test_line_spanning_blocks(self):
        """A line which straddles two Data blocks is reassembled, and the block number moves on."""
        first = [0x1E, 0x00, 0x00, 0x0A, 0x87, 0x20, 0x22]
        second = [0x48, 0x49, 0x22, 0x00,
                  0x1F, 0x00, 0x00, 0x14, 0x81, 0xA5, 0x31, 0x30, 0x00,
                  0x00, 0x00]
        listing = create_listing_from_blocks(program_blocks(first, second, with_name=False))
        assert listing == '   10 PRINT "HI"\n   20 GOTO10\n'

    def test_line_number_spanning_blocks(self):
        first = [0x1E, 0x00, 0x00]
        second = [0x0A, 0x41, 0x00]
        listing = create_listing_from_blocks(program_blocks(first, second, with_name=False))
        assert listing == "   10 A\n"

    def test_next_block_number_accepted(self):
        """A line may start with the number of the following block."""
        payload = [0x1E, 0x00, 0x00, 0x0A, 0x41, 0x00, 0x1F, 0x00, 0x00, 0x14, 0x42, 0x00]
        assert create_listing_from_blocks(program_blocks(payload, with_name=False)) == "   10 A\n   20 B\n"

    def test_lines_are_yielded_one_at_a_time(self):
        payload = [0x1E, 0x00, 0x00, 0x0A, 0x41, 0x00, 0x1E, 0x00, 0x00, 0x14, 0x42, 0x00]
        lines = list(iter_listing_lines(program_blocks(payload)))
        assert lines == ["Program: TEST    \n", "   10 A\n", "   20 B\n"]


# =============================================================================
# Termination Tests
# =============================================================================

class TestTermination:
    """Tests for the zero bytes which end a program."""

    def test_three_zero_sentinel(self):
        payload = [0x1E, 0x00, 0x00, 0x0A, 0x87, 0x00, 0x00, 0x00, 0x00]
        assert create_listing_from_blocks(program_blocks(payload, with_name=False)) == "   10 PRINT\n"

    def test_two_zero_sentinel(self):
        payload = [0x1E, 0x00, 0x00, 0x0A, 0x87, 0x00, 0x00, 0x00]
        assert create_listing_from_blocks(program_blocks(payload, with_name=False)) == "   10 PRINT\n"

    def test_sentinel_ignores_following_blocks(self):
        """Nothing after the sentinel is listed, whatever the rest of the data holds."""
        first = [0x1E, 0x00, 0x00, 0x0A, 0x87, 0x00, 0x00, 0x00, 0x00]
        second = [0x99, 0x99, 0x99]
        assert create_listing_from_blocks(program_blocks(first, second, with_name=False)) == "   10 PRINT\n"

    def test_only_sentinel(self):
        assert create_listing_from_blocks(program_blocks([0x00, 0x00, 0x00])) == "Program: TEST    \n"

    def test_listing_stops_at_eof_block(self):
        """Only the run of Data blocks is read; the End of File block isn't."""
        blocks = program_blocks([0x1E, 0x00, 0x00, 0x0A, 0x41, 0x00], with_name=False)
        blocks.append(make_block(0x01, data=[0x99]))
        assert create_listing_from_blocks(blocks) == "   10 A\n"


# =============================================================================
# Error Tests
# =============================================================================

class TestErrors:
    """Tests for malformed programs."""

    def test_bad_block_number(self):
        payload = [0x1E, 0x00, 0x00, 0x0A, 0x41, 0x00, 0x30, 0x00, 0x00, 0x14, 0x42, 0x00]
        with pytest.raises(BlockNumberError) as error:
            create_listing_from_blocks(program_blocks(payload, with_name=False))
        assert error.value.found == 0x30
        assert error.value.expected == 0x1E
        assert error.value.offset == 6
        assert isinstance(error.value, ReconstructionError)

    def test_lines_before_error_are_yielded(self):
        payload = [0x1E, 0x00, 0x00, 0x0A, 0x41, 0x00, 0x30, 0x00, 0x00, 0x14, 0x42, 0x00]
        lines = iter_listing_lines(program_blocks(payload, with_name=False))
        assert next(lines) == "   10 A\n"
        with pytest.raises(BlockNumberError):
            next(lines)

    def test_line_too_long(self):
        settings = DecoderSettings(max_line_length=4)
        payload = [0x1E, 0x00, 0x00, 0x0A, 0x41, 0x42, 0x43, 0x44, 0x45, 0x00]
        with pytest.raises(LineTooLongError) as error:
            create_listing_from_blocks(program_blocks(payload), settings=settings)
        assert error.value.max_length == 4

    def test_line_just_fits(self):
        settings = DecoderSettings(max_line_length=4)
        payload = [0x1E, 0x00, 0x00, 0x0A, 0x41, 0x42, 0x43, 0x00]
        listing = create_listing_from_blocks(program_blocks(payload, with_name=False), settings=settings)
        assert listing == "   10 ABC\n"

    def test_truncated_line(self):
        payload = [0x1E, 0x00, 0x00, 0x0A, 0x41, 0x42]
        with pytest.raises(TruncatedProgramError):
            create_listing_from_blocks(program_blocks(payload))

    def test_truncated_line_number(self):
        with pytest.raises(TruncatedProgramError):
            create_listing_from_blocks(program_blocks([0x1E, 0x00, 0x00]))
