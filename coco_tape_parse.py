#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# coco_tape_parse.py
#
# This Python script extracts BASIC programs from WAV recordings of audio
# cassette tapes recorded by the TRS-80 Color Computer (CoCo), and lists
# them as text.
#
# Copyright (C) 2022 Dominic Ford <https://dcford.org.uk/>
#
# This code is free software; you can redistribute it and/or modify it under
# the terms of the GNU General Public License as published by the Free Software
# Foundation; either version 2 of the License, or (at your option) any later
# version.
#
# You should have received a copy of the GNU General Public License along with
# this file; if not, write to the Free Software Foundation, Inc., 51 Franklin
# Street, Fifth Floor, Boston, MA  02110-1301, USA

# ----------------------------------------------------------------------------

"""
This Python script extracts BASIC programs from WAV recordings of audio cassette tapes recorded by the TRS-80 Color
Computer, and produces textual listings of them.

The Color Computer writes a 0 as one cycle of 1200 Hz, and a 1 as one cycle of 2400 Hz, giving roughly 1500 baud.
We measure the length of each wave cycle as the number of samples between consecutive downward zero-crossings, and
classify it as a 1 or a 0 according to configurable ranges of cycle lengths. Cycles which fall in neither range are
ignored.

The resulting bits are assembled into Namefile, Data and End of File blocks. Whenever an End of File block is found,
the BASIC program held in the preceding Data blocks is listed.

Limitations:

* Only 16-bit mono WAV files, sampled at 44.1kHz, are supported.

* Only tokenized (binary) BASIC programs are listed. A checksum failure stops decoding, unless --keep-going is given.

If a more sophisticated export is required, it is simple to call the <WavCocoFileSearch> class from an external
script.
"""

import argparse
import logging
import sys

from typing import Dict, Iterator, List, Optional

from coco_block_parser import Block, CocoBlockParser
from constants import BLOCK_TYPE_DATA, BLOCK_TYPE_EOF, BLOCK_TYPE_NAME
from decoder_settings import DecoderSettings
from errors import CocoTapeError, DecodeError, ReconstructionError
from list_coco_basic import iter_listing_lines
from wav_file_reader import WavFileReader


class WavCocoFileSearch:
    """
    Class to extract BASIC programs from wav recordings of TRS-80 Color Computer tapes.
    """

    def __init__(self, input_filename: Optional[str] = None, settings: Optional[DecoderSettings] = None):
        """
        Extract BASIC programs from WAV recordings of Color Computer tapes.

        :param input_filename:
            Filename of the wav file to process. If None, samples must be passed to <decode_samples>.
        :param settings:
            Decoder settings, including the cycle-length thresholds used to classify bits
        :return:
        """

        # Input settings
        self.input_filename = input_filename
        self.settings = settings if settings is not None else DecoderSettings()

        # Open wav file
        self.wav_file = None
        if input_filename is not None:
            self.wav_file = WavFileReader(input_filename=self.input_filename)

        # Statistics about the decoding
        self.sample_count = 0  # Number of audio samples processed
        self.cycle_count = 0  # Number of wave cycles found
        self.unclassified_count = 0  # Number of wave cycles which were neither a 0 nor a 1
        self.block_count = 0  # Number of blocks successfully read

        # Brief description of each block we read, for the verbose summary
        self.block_log: List[Dict] = []

    def classify_cycle(self, cycle_length: int):
        """
        Classify a wave cycle as a binary 1 or 0, based on its length.

        :param cycle_length:
            The number of samples between the downward zero-crossings at either end of the cycle
        :return:
            1, 0, or None if the cycle isn't a valid bit
        """

        settings = self.settings
        if settings.one_low <= cycle_length <= settings.one_high:
            return 1
        if settings.zero_low <= cycle_length <= settings.zero_high:
            return 0
        return None

    def search_wav_file(self):
        """
        Main entry point for extracting BASIC programs from a wav recording of a Color Computer tape.

        :return:
            List of program objects recovered
        """

        samples = self.wav_file.fetch_samples()
        return self.decode_samples(samples=samples)

    def decode_samples(self, samples):
        """
        Extract BASIC programs from a sequence of 16-bit audio samples.

        :param samples:
            Sequence of signed 16-bit samples
        :return:
            List of program objects recovered
        """

        return list(self.iter_programs(samples=samples))

    def iter_programs(self, samples) -> Iterator[Dict]:
        """
        Extract BASIC programs from a sequence of 16-bit audio samples, returning each program as soon as its End of
        File block has been read.

        :param samples:
            Sequence of signed 16-bit samples
        :return:
            Iterator over dictionaries describing each program
        """

        # Statistics describe the most recent decode only
        self.sample_count = len(samples)
        self.cycle_count = 0
        self.unclassified_count = 0
        self.block_count = 0
        self.block_log = []

        # Fetch the length of each wave cycle, measured from one downward zero crossing to the next
        cycle_lengths = WavFileReader.fetch_cycle_lengths(samples=samples)

        # The block parser assembles bits into blocks
        parser = CocoBlockParser(settings=self.settings)

        # The blocks of the program we're currently reading
        block_list: List[Block] = []

        # After a skipped decode error, the rest of the damaged program is dropped
        skipping = False

        for cycle_length in cycle_lengths:
            self.cycle_count += 1

            # Turn this wave cycle into a bit, if we can
            bit = self.classify_cycle(cycle_length=int(cycle_length))
            if bit is None:
                self.unclassified_count += 1
                logging.debug("Not 1200/2400Hz waveform: {:d}".format(int(cycle_length)))
                continue

            try:
                block = parser.feed_bit(bit=bit)
            except DecodeError as error:
                self._handle_decode_error(error=error)
                block_list = []
                parser.reset()
                skipping = True
                continue

            if block is None:
                continue

            # We have read a complete block
            self.block_count += 1
            self.block_log.append({'type': block.block_type, 'length': block.length})

            # Drop what's left of a damaged program, until its End of File block or the next Namefile block
            if skipping:
                if block.block_type == BLOCK_TYPE_EOF:
                    logging.debug("End of damaged program")
                    skipping = False
                    continue
                if block.block_type != BLOCK_TYPE_NAME:
                    continue
                skipping = False

            block_list.append(block)

            # An End of File block means we have a complete program
            if block.block_type == BLOCK_TYPE_EOF:
                program = self._list_program(block_list=block_list, complete=True)
                block_list = []
                yield program

        # List whatever is left over at the end of the tape
        if len(block_list) > 0:
            yield self._list_program(block_list=block_list, complete=False)

    def _list_program(self, block_list: List[Block], complete: bool):
        """
        Produce a listing of the BASIC program held in a list of blocks.

        :param block_list:
            The blocks of this program
        :param complete:
            Boolean flag indicating whether the program ended with an End of File block
        :return:
            Dictionary describing the program
        """

        lines = []
        try:
            for line in iter_listing_lines(block_list=block_list, settings=self.settings):
                lines.append(line)
        except ReconstructionError as error:
            error.partial_listing = "".join(lines)
            self._handle_decode_error(error=error)
            error_message = str(error)
        else:
            error_message = None

        name = None
        if block_list[0].block_type == BLOCK_TYPE_NAME:
            name = block_list[0].name

        return {
            'name': name,  # Program name from the Namefile block, if there was one
            'block_count': len(block_list),  # Number of blocks in this program
            'complete': complete,  # Did the program end with an End of File block?
            'listing': "".join(lines),  # Text listing of the program
            'error': error_message  # Description of the error which stopped the listing, if any
        }

    def _handle_decode_error(self, error: DecodeError):
        # By default, a decode error stops everything
        if not self.settings.keep_going:
            raise error

        logging.error("{}; skipping to next program".format(error))

    @staticmethod
    def summarise_blocks(block_log: List[Dict]):
        """
        Output human-readable text describing all the blocks we read from the tape.

        :param block_log:
            List of block descriptions, as stored in <self.block_log>
        :return:
            String containing one line per block
        """

        output = ""
        for item in block_log:
            if item['type'] == BLOCK_TYPE_NAME:
                output += "Name Block\n"
            elif item['type'] == BLOCK_TYPE_DATA:
                output += "DATA Block ({:d})\n".format(item['length'])
            elif item['type'] == BLOCK_TYPE_EOF:
                output += "EOF Block\n"
            else:
                output += "Bad block type {}\n".format(item['type'])
        return output


def main(argv: Optional[List[str]] = None):
    """
    Command-line entry point.

    :param argv:
        Command-line arguments (defaults to <sys.argv>)
    :return:
        Exit status
    """

    # Read input parameters
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument('--input',
                        required=True,
                        type=str,
                        dest="input_filename",
                        help="Input WAV file to process (16-bit mono PCM, 44.1kHz)")
    parser.add_argument('--one-low',
                        default=DecoderSettings.one_low,
                        type=int,
                        dest="one_low",
                        help="Shortest cycle, in samples, that counts as a 1")
    parser.add_argument('--one-high',
                        default=DecoderSettings.one_high,
                        type=int,
                        dest="one_high",
                        help="Longest cycle, in samples, that counts as a 1")
    parser.add_argument('--zero-low',
                        default=DecoderSettings.zero_low,
                        type=int,
                        dest="zero_low",
                        help="Shortest cycle, in samples, that counts as a 0")
    parser.add_argument('--zero-high',
                        default=DecoderSettings.zero_high,
                        type=int,
                        dest="zero_high",
                        help="Longest cycle, in samples, that counts as a 0")
    parser.add_argument('--keep-going',
                        action='store_true',
                        dest="keep_going",
                        help="Skip to the next program after a decode error, rather than stopping")
    parser.add_argument('--verbose',
                        action='store_true',
                        dest="verbose",
                        help="Show a summary of the blocks found")
    parser.add_argument('--debug',
                        action='store_true',
                        dest="debug",
                        help="Show full debugging output")
    parser.set_defaults(debug=False, verbose=False, keep_going=False)
    args = parser.parse_args(argv)

    # Set up a logging object
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        stream=sys.stdout,
                        format='[%(asctime)s] %(levelname)s:%(filename)s:%(message)s',
                        datefmt='%d/%m/%Y %H:%M:%S')
    logger = logging.getLogger(__name__)
    logger.debug(__doc__.strip())

    try:
        settings = DecoderSettings(one_low=args.one_low, one_high=args.one_high,
                                   zero_low=args.zero_low, zero_high=args.zero_high,
                                   debug=args.debug, verbose=args.verbose, keep_going=args.keep_going)

        # Open input audio file
        processor = WavCocoFileSearch(input_filename=args.input_filename, settings=settings)
        try:
            samples = processor.wav_file.fetch_samples()
        finally:
            processor.wav_file.close()
        if settings.verbose:
            logging.info("Samples: {:d}".format(len(samples)))

        # List each program as soon as we find it
        for program in processor.iter_programs(samples=samples):
            print(program['listing'], end="")
    except CocoTapeError as error:
        if isinstance(error, ReconstructionError) and error.partial_listing:
            print(error.partial_listing, end="")
        logging.error("Decode error: {}".format(error))
        return 1

    # Write a summary of the blocks we found
    if settings.verbose:
        logging.info("Decoded {:d} blocks ({:d} cycles, {:d} not recognised as bits)".format(
            processor.block_count, processor.cycle_count, processor.unclassified_count))
        logging.info("\n" + processor.summarise_blocks(block_log=processor.block_log))

    return 0


# Do it right away if we're run as a script
if __name__ == "__main__":
    sys.exit(main())
