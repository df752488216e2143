# -*- coding: utf-8 -*-
# wav_file_reader.py
#
# The Python script in this file provides a utility class for reading WAV
# recordings containing the audio of tapes recorded by 8-bit computers.
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
Utility class to read WAV audio streams of old 8-bit computer tapes, and extract a list of downward zero-crossings
from the audio. The intervals between these crossings are the wave cycles which encode the binary bits on the tape.
"""

import logging
import wave

import numpy as np

from errors import WavFormatError


class WavFileReader:
    """
    Utility class to read WAV audio streams of old 8-bit computer tapes, and measure the lengths of the wave cycles
    in the audio.
    """

    def __init__(self, input_filename: str, expected_sampling_frequency: int = 44100):
        """
        Utility class to read WAV audio streams of old 8-bit computer tapes.

        :param input_filename:
            Filename of the wav file to process.
        :param expected_sampling_frequency:
            The only sampling frequency we accept (Hz). The cycle-length thresholds are calibrated for this rate.
        :return:
        """

        # Input settings
        self.input_filename = input_filename

        # Open wav file
        try:
            self.wav_file = wave.open(self.input_filename, "rb")
        except (OSError, EOFError, wave.Error) as error:
            raise WavFormatError("Failed to open <{}>: {}".format(self.input_filename, error))

        # Populate metadata about the input audio stream
        self.channels = self.wav_file.getnchannels()  # channel count
        self.bit_width = self.wav_file.getsampwidth() * 8  # bits per sample
        self.sampling_frequency = self.wav_file.getframerate()  # Hz
        self.frame_count = self.wav_file.getnframes()  # frame count
        self.length = self.frame_count / self.sampling_frequency  # seconds

        # Report metadata about the wav file
        logging.info("Opened <{}>: {} channels, {} bits wide, {} frames/sec, length {:.0f}m{:.1f}s".format(
            self.input_filename, self.channels, self.bit_width, self.sampling_frequency,
            self.length // 60, self.length % 60))

        # Check that wav file is 16-bit mono, the only format we currently support
        if self.channels != 1:
            self.wav_file.close()
            raise WavFormatError("Number of channels should be 1, is {:d}".format(self.channels))
        if self.bit_width != 16:
            self.wav_file.close()
            raise WavFormatError("Bits per sample should be 16, is {:d}".format(self.bit_width))
        if self.sampling_frequency != expected_sampling_frequency:
            self.wav_file.close()
            raise WavFormatError("Sample rate should be {:d}, is {:d}".format(expected_sampling_frequency,
                                                                           self.sampling_frequency))

    def close(self):
        """
        Close the WAV file.

        :return:
            None
        """

        self.wav_file.close()

    def fetch_samples(self):
        """
        Fetch every sample in a 16-bit mono WAV file.

        :return:
            numpy array of 16-bit signed integers
        """

        # Start from the beginning of the file
        self.wav_file.rewind()

        # Read all the frames in one go (WAV files are little-endian)
        wave_data = self.wav_file.readframes(self.frame_count)

        # A data chunk cut short in the middle of a frame leaves a stray byte
        if len(wave_data) % 2 != 0:
            raise WavFormatError("Failed to read data bytes: data ends in the middle of a sample")

        samples = np.frombuffer(wave_data, dtype='<i2')

        if len(samples) != self.frame_count:
            raise WavFormatError("Failed to read data bytes: expected {:d} samples, got {:d}".format(
                self.frame_count, len(samples)))

        logging.debug("Read {:d} samples".format(len(samples)))
        return samples

    @staticmethod
    def fetch_zero_crossing_indices(samples):
        """
        Extract a list of all the sample indices where the signal on the tape crosses zero, in the downward direction.
        A crossing is at index i when sample i is negative, and sample i-1 is zero or positive.

        :param samples:
            Sequence of 16-bit signed integer samples
        :return:
            numpy array of sample indices
        """

        samples = np.asarray(samples, dtype=np.int32)

        # Downward zero crossings
        crossings = np.flatnonzero((samples[1:] < 0) & (samples[:-1] >= 0)) + 1

        # Log number of zero-crossings
        logging.debug("Found {:d} zero-crossing events".format(len(crossings)))

        return crossings

    @staticmethod
    def fetch_cycle_lengths(samples):
        """
        Extract a list of the number of samples spanned by each wave cycle, measured from one downward zero crossing
        to the next. The first cycle is measured from sample 1, which is the first sample that can be a crossing.

        :param samples:
            Sequence of 16-bit signed integer samples
        :return:
            numpy array of cycle lengths, in samples
        """

        crossings = WavFileReader.fetch_zero_crossing_indices(samples=samples)
        return np.diff(crossings, prepend=1)
