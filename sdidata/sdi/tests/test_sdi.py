# Licensed under the GPLv3 - see LICENSE
import io

import pytest
import numpy as np
import astropy.units as u

from ... import sdi
from ...base.encoding import MalformedPayload, SafeValueCodec
from ...base.frame import PayloadTooLarge


CARRIER_NBYTES = 1920 * 1080 * 4
HELLO_FRAME = bytes([0xde, 0xad, 0xb0, 0x0b, 1, 1, 1, 12]) + b'Hello world'


class TestSDIHeader:
    def test_header(self, tmpdir):
        header = sdi.SDIHeader.fromvalues(payload_nbytes=11)
        assert header.words == [0xdeadb00b, 0x0101010c]
        assert header.nbytes == 8
        assert header.tagged
        assert header['magic'] == 0xdeadb00b
        assert header['safe_length'] == 0x0101010c
        assert header.payload_nbytes == 11
        assert header.frame_nbytes == 19
        assert 'magic' in header
        assert set(header.keys()) == {'magic', 'safe_length'}
        assert header.mutable

        with io.BytesIO() as s:
            header.tofile(s)
            assert s.getvalue() == HELLO_FRAME[:8]
            s.seek(0)
            header2 = sdi.SDIHeader.fromfile(s)
        assert header2 == header
        assert not header2.mutable
        with pytest.raises(TypeError):
            header2['safe_length'] = 0x01010101
        header3 = header2.copy()
        assert header3.mutable
        header3.payload_nbytes = 254
        assert header3['safe_length'] == 0x01010201
        assert header3 != header2
        header4 = sdi.SDIHeader.fromkeys(**header)
        assert header4 == header
        with pytest.raises(KeyError):
            sdi.SDIHeader.fromkeys(magic=0xdeadb00b)

    def test_defaults(self):
        header = sdi.SDIHeader.fromvalues()
        assert header.payload_nbytes == 0
        assert header.words == [0xdeadb00b, 0x01010101]
        untagged = sdi.SDIUntaggedHeader.fromvalues(payload_nbytes=2)
        assert untagged.words == [0x01010103]
        assert untagged.nbytes == 4
        assert not untagged.tagged
        assert 'magic' not in untagged
        with pytest.raises(KeyError):
            untagged['magic']

    def test_verify(self):
        with pytest.raises(AssertionError):
            sdi.SDIHeader((0x12345678, 0x0101010c))
        header = sdi.SDIHeader((0x12345678, 0x0101010c), verify=False)
        assert header['magic'] == 0x12345678
        with pytest.raises(AssertionError):
            sdi.SDIHeader((0xdeadb00b,))
        with pytest.raises(ValueError):
            sdi.SDIHeader.fromvalues(payload_nbytes=254**4)
        with pytest.warns(UserWarning, match='unused'):
            sdi.SDIHeader.fromvalues(payload_nbytes=1, bla=1)

    def test_repr(self):
        header = sdi.SDIHeader.fromvalues(payload_nbytes=11)
        r = repr(header)
        assert r.startswith('<SDIHeader magic: 0xdeadb00b,')
        assert r.endswith('safe_length: 0x101010c>')


class TestSDIPayload:
    def test_payload(self):
        payload = sdi.SDIPayload.fromdata(bytes([0, 2, 3, 4, 254, 255]))
        assert payload.words.tobytes() == bytes([254, 1, 2, 3, 4, 254, 2,
                                                 254, 3])
        assert payload.nbytes == 9
        assert len(payload) == 6
        assert payload.data == bytes([0, 2, 3, 4, 254, 255])

        text = sdi.SDIPayload.fromdata('naïve ☃')
        assert text.text == 'naïve ☃'
        assert text.data == 'naïve ☃'.encode('utf-8')

    def test_header_consistency(self):
        header = sdi.SDIHeader.fromvalues(payload_nbytes=3)
        with pytest.raises(ValueError):
            sdi.SDIPayload.fromdata(b'ab', header=header)
        with pytest.raises(ValueError):
            sdi.SDIPayload(np.zeros(3, 'i4'))

    def test_file_round_trip(self):
        payload = sdi.SDIPayload.fromdata(b'\x00\xff')
        with io.BytesIO() as s:
            payload.tofile(s)
            s.seek(0)
            payload2 = sdi.SDIPayload.fromfile(s, payload_nbytes=4)
            assert payload2 == payload
            s.seek(0)
            with pytest.raises(EOFError):
                sdi.SDIPayload.fromfile(s, payload_nbytes=5)
            with pytest.raises(ValueError):
                sdi.SDIPayload.fromfile(s)

    def test_malformed(self):
        payload = sdi.SDIPayload(np.array([0x41, 254], 'u1'))
        assert payload.nbytes == 2
        with pytest.raises(MalformedPayload):
            payload.data


class TestReadWriteFrame:
    def setup_method(self):
        self.carrier = bytearray(CARRIER_NBYTES)

    def test_hello_world(self):
        sdi.write_frame(self.carrier, 'Hello world')
        assert self.carrier[:19] == HELLO_FRAME
        assert not np.frombuffer(self.carrier, 'u1')[19:].any()
        assert sdi.read_frame(self.carrier) == b'Hello world'

    def test_empty_carrier(self):
        assert sdi.read_frame(self.carrier) is None
        assert sdi.read_frame(self.carrier, expect_magic=False) is None

    def test_top_level_functions(self):
        from ... import read_frame, write_frame
        write_frame(self.carrier, b'top')
        assert read_frame(self.carrier) == b'top'

    def test_carrier_types(self):
        for carrier in (self.carrier, memoryview(self.carrier),
                        np.zeros((8, 16, 4), 'u1'),
                        np.zeros((10, 10), 'u4')):
            sdi.write_frame(carrier, b'\x00\xfe\xff')
            assert sdi.read_frame(carrier) == b'\x00\xfe\xff'

        sdi.write_frame(self.carrier, b'abc')
        assert sdi.read_frame(bytes(self.carrier)) == b'abc'
        with pytest.raises(TypeError):
            sdi.write_frame(bytes(20), b'abc')
        with pytest.raises(ValueError):
            sdi.write_frame(np.zeros((16, 16), 'u1')[:, ::2], b'abc')

    def test_filler_untouched(self):
        carrier = np.full(64, 0x80, 'u1')
        sdi.write_frame(carrier, b'ab')
        assert np.all(carrier[10:] == 0x80)
        assert sdi.read_frame(carrier) == b'ab'

    def test_empty_payload(self):
        sdi.write_frame(self.carrier, b'')
        assert self.carrier[:8] == bytes([0xde, 0xad, 0xb0, 0x0b, 1, 1, 1, 1])
        # A frame without data is indistinguishable from no frame.
        assert sdi.read_frame(self.carrier) is None

    def test_all_bytes(self):
        data = bytes(range(256))
        sdi.write_frame(self.carrier, data)
        written = np.frombuffer(self.carrier, 'u1')[:8 + 259]
        assert 0 not in written
        assert 255 not in written
        assert sdi.read_frame(self.carrier) == data

    def test_large_payload(self):
        data = np.ones(1024 * 10, 'u1')
        data[103] = 255
        sdi.write_frame(self.carrier, data)
        assert sdi.read_frame(self.carrier) == data.tobytes()

    @pytest.mark.parametrize(('data', 'fits'), (
        (b'x' * 12, True),
        (b'x' * 13, False),
        (bytes(6), True),
        (bytes(7), False)))
    def test_too_large(self, data, fits):
        carrier = bytearray(20)
        if fits:
            sdi.write_frame(carrier, data)
            assert sdi.read_frame(carrier) == data
        else:
            with pytest.raises(PayloadTooLarge):
                sdi.write_frame(carrier, data)
            assert carrier == bytearray(20)

    def test_too_large_for_header(self, monkeypatch):
        # Restrict the safe length to one digit, so it overflows easily.
        monkeypatch.setattr(sdi.SDIHeader, '_safe_codec',
                            SafeValueCodec(254, width=1))
        with pytest.raises(PayloadTooLarge):
            sdi.SDIFrame.fromdata(b'x' * 254)
        assert isinstance(PayloadTooLarge('x'), ValueError)

    def test_foreign_carriers(self):
        rng = np.random.default_rng(12345)
        carrier = rng.integers(0, 256, 1024, dtype='u1')
        carrier[:4] = [0xde, 0xad, 0xbe, 0xef]
        assert sdi.read_frame(carrier) is None
        assert sdi.read_frame(bytes(3)) is None

    @pytest.mark.parametrize('length', (
        [1, 1, 1, 14],    # exceeds remaining capacity
        [1, 1, 1, 1],     # zero length
        [1, 1, 1, 255],   # not a valid radix 254 digit
        [0, 1, 1, 2]))    # forbidden byte
    def test_invalid_length(self, length):
        carrier = bytearray(20)
        carrier[:8] = bytes([0xde, 0xad, 0xb0, 0x0b] + length)
        carrier[8:] = b'x' * 12
        assert sdi.read_frame(carrier) is None
        assert sdi.SDIFrame.read(carrier) is None

    def test_corrupt_payload(self):
        carrier = bytearray(20)
        carrier[:9] = bytes([0xde, 0xad, 0xb0, 0x0b, 1, 1, 1, 2, 254])
        with pytest.raises(MalformedPayload):
            sdi.read_frame(carrier)
        carrier[:10] = bytes([0xde, 0xad, 0xb0, 0x0b, 1, 1, 1, 3, 254, 9])
        with pytest.raises(MalformedPayload):
            sdi.read_frame(carrier)
        # The frame itself is still found.
        frame = sdi.SDIFrame.read(carrier)
        assert frame.payload.nbytes == 2

    def test_untagged(self):
        carrier = bytearray(20)
        sdi.write_frame(carrier, 'Hi', use_magic=False)
        assert carrier[:6] == bytes([1, 1, 1, 3]) + b'Hi'
        assert sdi.read_frame(carrier, expect_magic=False) == b'Hi'
        assert sdi.read_frame(carrier) is None
        sdi.write_frame(carrier, 'Hi')
        assert sdi.read_frame(carrier, expect_magic=False) is None


class TestSDIFrame:
    def test_frame(self):
        frame = sdi.SDIFrame.fromdata('Hello world')
        assert frame.tagged
        assert frame.nbytes == 19
        assert len(frame) == 11
        assert frame.text == 'Hello world'
        assert frame['magic'] == 0xdeadb00b
        assert 'safe_length' in frame
        assert set(frame.keys()) == {'magic', 'safe_length'}
        assert 'SDIFrame' in repr(frame)

        carrier = np.zeros(32, 'u1')
        frame.tobuffer(carrier)
        assert carrier[:19].tobytes() == HELLO_FRAME
        frame2 = sdi.SDIFrame.frombuffer(carrier)
        assert frame2 == frame
        frame3 = sdi.SDIFrame.read(carrier)
        assert frame3 == frame

        with io.BytesIO() as s:
            frame.tofile(s)
            assert s.getvalue() == HELLO_FRAME
            s.seek(0)
            frame4 = sdi.SDIFrame.fromfile(s)
        assert frame4 == frame

    def test_frombuffer_errors(self):
        with pytest.raises(AssertionError):
            sdi.SDIFrame.frombuffer(bytes(32))
        with pytest.raises(EOFError):
            sdi.SDIFrame.frombuffer(bytes(4))
        with pytest.raises(EOFError):
            sdi.SDIFrame.frombuffer(HELLO_FRAME[:12])

    def test_untagged(self):
        frame = sdi.SDIFrame.fromdata(b'Hi', magic=False)
        assert not frame.tagged
        assert isinstance(frame.header, sdi.SDIUntaggedHeader)
        assert frame.nbytes == 6
        assert frame != sdi.SDIFrame.fromdata(b'Hi')

    def test_write_returns_frame(self):
        carrier = bytearray(32)
        frame = sdi.SDIFrame.write(carrier, b'\xff')
        assert frame.payload.words.tobytes() == b'\xfe\x03'
        assert frame.data == b'\xff'


class TestSDIFiles:
    def setup_method(self):
        self.kwargs = dict(width=16, height=8)
        self.carrier_nbytes = 16 * 8 * 4

    def test_binary_file(self, tmpdir):
        name = str(tmpdir.join('test.sdi'))
        with sdi.open(name, 'wb', carrier_nbytes=64) as fw:
            assert isinstance(fw, sdi.base.SDIFileWriter)
            fw.write_frame(b'first')
            fw.write_frame()
            fw.write_frame('third')
            with pytest.raises(PayloadTooLarge):
                fw.write_frame(b'x' * 100)

        with sdi.open(name, 'rb', carrier_nbytes=64) as fr:
            assert isinstance(fr, sdi.base.SDIFileReader)
            assert fr.number_of_carriers == 3
            assert fr.tell() == 0
            carrier = fr.read_carrier()
            assert len(carrier) == 64
            assert sdi.read_frame(carrier) == b'first'
            assert fr.read_payload() is None
            frame = fr.read_frame()
            assert frame.text == 'third'
            with pytest.raises(EOFError):
                fr.read_carrier()
            assert 'carrier_nbytes=64' in repr(fr)

    def test_stream(self, tmpdir):
        name = str(tmpdir.join('test.sdi'))
        with sdi.open(name, 'ws', **self.kwargs) as fw:
            assert isinstance(fw, sdi.base.SDIStreamWriter)
            assert fw.carrier_nbytes == self.carrier_nbytes
            assert fw.magic
            assert fw.write('hello') == 0
            assert fw.write_carrier() == 1
            fw.put(b'\x00\xc3\xa9')
            fw.put('world')
            assert fw.pending == 2
            assert fw.write_carrier() == 2
            assert fw.tell() == 3
            assert abs(fw.time - 120 * u.ms) < 1 * u.ns
            assert abs(fw.tell(unit=u.s) - 0.12 * u.s) < 1 * u.ns
        # Closing flushes the queue.
        assert fw.frame_nr == 4

        with sdi.open(name, 'rs', encoding=None, **self.kwargs) as fr:
            assert isinstance(fr, sdi.base.SDIStreamReader)
            assert fr.readable()
            assert fr.fh_raw.number_of_carriers == 4
            assert fr.read() == b'hello'
            assert fr.read() is None
            assert fr.read() == b'\x00\xc3\xa9'
            assert fr.read() == b'world'
            with pytest.raises(EOFError):
                fr.read()

        with sdi.open(name, **self.kwargs) as fr:
            assert list(fr) == ['hello', '\x00\u00e9', 'world']
            assert fr.seek(3) == 3
            assert abs(fr.time - 120 * u.ms) < 1 * u.ns
            assert fr.read() == 'world'
            with pytest.raises(ValueError):
                fr.seek(-1)
            assert 'SDIStreamReader' in repr(fr)

    def test_frame_rate(self, tmpdir):
        name = str(tmpdir.join('test.sdi'))
        with sdi.open(name, 'ws', frame_rate=50 * u.Hz, **self.kwargs) as fw:
            for i in range(5):
                fw.write(str(i))
            assert abs(fw.time - 100 * u.ms) < 1 * u.ns
            assert fw.frame_rate == 50 * u.Hz

    def test_queue_overflow(self, tmpdir):
        name = str(tmpdir.join('test.sdi'))
        with sdi.open(name, 'ws', maxsize=2, **self.kwargs) as fw:
            assert fw.maxsize == 2
            fw.put('a')
            fw.put('b')
            with pytest.warns(UserWarning, match='queue full'):
                fw.put('c')
            assert fw.pending == 2
            fw.flush()
            assert fw.pending == 0
            assert fw.frame_nr == 2

        with sdi.open(name, 'rs', **self.kwargs) as fr:
            assert list(fr) == ['b', 'c']

    def test_too_large(self, tmpdir):
        name = str(tmpdir.join('test.sdi'))
        with sdi.open(name, 'ws', **self.kwargs) as fw:
            with pytest.warns(UserWarning, match='skipping payload in frame 0'):
                fw.write(b'x' * self.carrier_nbytes)
            fw.write('fits')

        with sdi.open(name, 'rs', **self.kwargs) as fr:
            assert fr.fh_raw.number_of_carriers == 2
            assert fr.read() is None
            assert fr.read() == 'fits'

    def test_corrupt(self, tmpdir):
        name = str(tmpdir.join('test.sdi'))
        carriers = np.zeros((3, self.carrier_nbytes), 'u1')
        carriers[0, :9] = [0xde, 0xad, 0xb0, 0x0b, 1, 1, 1, 2, 254]
        carriers[1, :10] = [0xde, 0xad, 0xb0, 0x0b, 1, 1, 1, 3, 0xc3, 0x28]
        sdi.write_frame(carriers[2], 'ok')
        with open(name, 'wb') as fh:
            fh.write(carriers.tobytes())

        with sdi.open(name, 'rs', **self.kwargs) as fr:
            with pytest.warns(UserWarning, match='corrupt payload in frame 0'):
                assert fr.read() is None
            with pytest.warns(UserWarning, match='corrupt payload in frame 1'):
                assert fr.read() is None
            assert fr.read() == 'ok'

        with sdi.open(name, 'rs', encoding=None, **self.kwargs) as fr:
            fr.seek(1)
            assert fr.read() == b'\xc3\x28'

    def test_untagged_stream(self, tmpdir):
        name = str(tmpdir.join('test.sdi'))
        with sdi.open(name, 'ws', magic=False, **self.kwargs) as fw:
            assert not fw.magic
            fw.write('plain')

        with open(name, 'rb') as fh:
            assert fh.read(9) == bytes([1, 1, 1, 6]) + b'plain'

        with sdi.open(name, 'rs', **self.kwargs) as fr:
            assert fr.read() is None
        with sdi.open(name, 'rs', magic=False, **self.kwargs) as fr:
            assert fr.read() == 'plain'

    def test_filehandle(self, tmpdir):
        name = str(tmpdir.join('test.sdi'))
        with open(name, 'w+b') as fh:
            fw = sdi.open(fh, 'ws', **self.kwargs)
            fw.write('via handle')
            fh.seek(0)
            fr = sdi.open(fh, 'rs', **self.kwargs)
            assert fr.read() == 'via handle'

    def test_opener(self, tmpdir):
        name = str(tmpdir.join('test.sdi'))
        with sdi.open(name, 'w', **self.kwargs) as fw:
            assert isinstance(fw, sdi.base.SDIStreamWriter)
            fw.write('x')
        with sdi.open(name, 'sr', **self.kwargs) as fr:
            assert isinstance(fr, sdi.base.SDIStreamReader)
        with pytest.raises(ValueError):
            sdi.open(name, 'x')
        with pytest.raises(TypeError):
            sdi.open(name, 'rs', bla=1)
        assert 'Open SDI carrier file' in sdi.open.__doc__
        assert sdi.open.__module__ == 'sdidata.sdi.base'
