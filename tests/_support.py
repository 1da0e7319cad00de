"""Fake transport and payload builders shared by the tests."""

import struct

import numpy as np

OK = b'\x06\x30'
BAD_REQUEST = b'\x15\x32'


class ScriptedTransport:
    """Replays canned bulk frames and records every write."""

    def __init__(self, frames=()):
        self.frames = list(frames)
        self.writes = []
        self.read_sizes = []

    def queue(self, *frames):
        self.frames.extend(frames)

    def respond(self, payload):
        self.frames.extend([OK, payload])

    def write(self, data):
        self.writes.append(bytes(data))

    def read(self, max_len):
        self.read_sizes.append(max_len)
        if not self.frames:
            raise AssertionError("Transport read with no frame queued")
        frame = self.frames.pop(0)
        if isinstance(frame, Exception):
            raise frame
        return frame


class DeviceTransport(ScriptedTransport):
    """Answers commands from a dict, so enumeration can be replayed in any order."""

    def __init__(self, answers):
        super().__init__()
        self.answers = answers

    def write(self, data):
        super().write(data)
        answer = self.answers.get(bytes(data))
        if answer is None:
            self.queue(BAD_REQUEST)
        else:
            self.respond(answer)


def f32(value):
    return struct.pack('>f', value)


def f64(value):
    return struct.pack('>d', value)


def f32_array(values):
    return np.asarray(values, dtype='>f4').tobytes()


def payload(tag, fields):
    return tag + b'@@' + b','.join(fields)


def capture_info_fields(title=b'Studio', cct=5600.0, lux=1234.5, scale=1.0):
    """Fields of a well-formed MRB payload, in schema order."""
    return [
        b'0001',                             # unknown1
        b'A',                                # unknown2
        title + b'\x00' * (16 - len(title)),  # title
        b'1',                                # measuring mode
        b'2',                                # field of view
        b'\x00\x01\x02\x03',                 # unknown3
        f32(cct),
        f32(0.0025),
        f32(lux),
        f32(114.75),
        f64(4.25),
        f32(95.5), f32(100.0), f32(108.25),
        f32(0.3125), f32(0.328125), f32(0.359375),
        f32(0.1953125), f32(0.46875),
        f32(480.5),
        f32(3.5),
        f32(21.75),
        f32(96.5),
        f32_array([90.0 + i for i in range(15)]),
        b'\xde\xad\xbe\xef\x00\x2c\x2c\x01',  # unknown4, contains commas
        f32_array([scale * i / 80 for i in range(81)]),
        f32_array([scale * i / 400 for i in range(401)]),
    ]


def capture_info_payload(**kwargs):
    return payload(b'MRB', capture_info_fields(**kwargs))


def capture_data_fields():
    return [
        b'07',
        f32(92.0),
        f32(101.5),
        f32_array([i * 0.25 for i in range(64)]),
        f32(88.0),
        f32(97.0),
        b'1', b'XY', b'0003',
    ]


def capture_data_payload():
    return payload(b'MEB', capture_data_fields())
