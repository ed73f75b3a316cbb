"""Tests for generated decoders"""

import os
import random

import pytest
from pytest import raises

from tlsgen.generator import load, reflect_all
from tlsgen.generator.python import render
from tlsgen.generator.schema import FixedUint, LengthPrefixedBytes, LengthPrefixedList
from tlsgen.proto import MalformedInputError

FILE_DIR = os.path.dirname(os.path.realpath(__file__))

RECORDS = ["keyConfig", "widths", "certificate", "nested"]


def gen_code(file_name, type_names):
    gbl = globals().copy()

    schemas = reflect_all(load(file_name), type_names)
    generated_code = render(schemas, runtime_import="tlsgen.proto")
    exec(generated_code, gbl)
    return gbl, {s.name: s for s in schemas}


@pytest.fixture(scope="module")
def gen():
    return gen_code(FILE_DIR + "/records.tls", RECORDS)[0]


def encode(fields, record):
    """Encode a decoded record back to bytes, for round-trip checks."""
    out = b""
    for f in fields:
        value = getattr(record, f.name)
        if isinstance(f, FixedUint):
            out += value.to_bytes(f.width // 8, "big")
        elif isinstance(f, LengthPrefixedBytes):
            out += len(value).to_bytes(f.length_prefix // 8, "big") + value
        elif isinstance(f, LengthPrefixedList):
            body = b"".join(encode(f.fields, elem) for elem in value)
            out += len(body).to_bytes(f.length_prefix // 8, "big") + body
    return out


def describe_key_config():
    def decodes_example(expect, gen):
        config = gen["parse_key_config"](bytes.fromhex("02abcd 0004 0001 0002"))
        expect(config.publicKey) == b"\xab\xcd"
        expect(config.ciphersuites) == [gen["suite"](kdfID=1, aeadID=2)]

    def rejects_truncated_input(expect, gen):
        with raises(MalformedInputError):
            gen["parse_key_config"](bytes.fromhex("02abcd 0004 0001 00"))

    def rejects_truncated_prefix(expect, gen):
        with raises(MalformedInputError):
            gen["parse_key_config"](bytes.fromhex("02abcd 00"))
        with raises(MalformedInputError):
            gen["parse_key_config"](b"")

    def rejects_short_byte_string(expect, gen):
        with raises(MalformedInputError):
            gen["parse_key_config"](bytes.fromhex("03abcd"))

    def decodes_empty_list(expect, gen):
        config = gen["parse_key_config"](bytes.fromhex("00 0000"))
        expect(config.publicKey) == b""
        expect(config.ciphersuites) == []

    def decodes_several_elements_in_order(expect, gen):
        config = gen["parse_key_config"](bytes.fromhex("00 000c 0001 0002 0003 0004 0005 0006"))
        suite = gen["suite"]
        expect(config.ciphersuites) == [suite(1, 2), suite(3, 4), suite(5, 6)]

    def rejects_partial_element(expect, gen):
        # 6 bytes is not a whole number of 4 byte suites
        with raises(MalformedInputError):
            gen["parse_key_config"](bytes.fromhex("00 0006 0001 0002 0003"))

    def ignores_trailing_input(expect, gen):
        config = gen["parse_key_config"](bytes.fromhex("00 0000 ffff"))
        expect(config.ciphersuites) == []

    def does_not_share_lists_between_records(expect, gen):
        a = gen["parse_key_config"](bytes.fromhex("00 0004 0001 0002"))
        b = gen["parse_key_config"](bytes.fromhex("00 0000"))
        expect(len(a.ciphersuites)) == 1
        expect(b.ciphersuites) == []


def describe_widths():
    def decodes_every_width(expect, gen):
        data = bytes.fromhex("01 0203 040506 0708090a 0b0c0d0e0f10 1112131415161718")
        w = gen["parse_widths"](data)
        expect((w.a, w.b, w.c, w.d, w.e, w.f)) == (
            0x01,
            0x0203,
            0x040506,
            0x0708090A,
            0x0B0C0D0E0F10,
            0x1112131415161718,
        )

    def rejects_every_truncation(expect, gen):
        data = bytes(1 + 2 + 3 + 4 + 6 + 8)
        gen["parse_widths"](data)
        for n in range(len(data)):
            with raises(MalformedInputError):
                gen["parse_widths"](data[:n])


def describe_nesting():
    def decodes_lists_of_lists(expect, gen):
        data = bytes.fromhex(
            "02 aabb"  # context
            "000011"  # entries region, 17 bytes
            "01 06 0005 0002 cafe"  # entry 1: one extension
            "02 05 000a 0001 ff"  # entry 2: one extension
            "03 00"  # entry 3: no extensions
        )
        cert = gen["parse_certificate"](data)
        expect(cert.context) == b"\xaa\xbb"
        expect([e.id for e in cert.entries]) == [1, 2, 3]
        expect(cert.entries[0].extensions[0].extType) == 5
        expect(cert.entries[0].extensions[0].data) == b"\xca\xfe"
        expect(cert.entries[1].extensions[0].data) == b"\xff"
        expect(cert.entries[2].extensions) == []

    def rejects_inner_overrun(expect, gen):
        # the extension claims 3 data bytes but its region holds 2
        data = bytes.fromhex("00 000008 01 06 0005 0003 cafe")
        with raises(MalformedInputError):
            gen["parse_certificate"](data)

    def keeps_same_named_lists_apart(expect, gen):
        data = bytes.fromhex("04 02 01 0a 00")
        n = gen["parse_nested"](data)
        expect(len(n.outer)) == 2
        expect([leaf.v for leaf in n.outer[0].items[0].items]) == [0x0A]
        expect(n.outer[1].items) == []
        expect(n.outer[0].items[0].items[0]) == gen["leaf"](v=0x0A)

    def keeps_same_named_lists_apart_with_siblings(expect, gen):
        # outer[0] has two level2 entries holding [1] and [2, 3]
        data = bytes.fromhex("06 05 01 01 02 02 03")
        n = gen["parse_nested"](data)
        expect([[leaf.v for leaf in l2.items] for l2 in n.outer[0].items]) == [[1], [2, 3]]


def describe_round_trip():
    def reencodes_decoded_records(expect):
        gbl, schemas = gen_code(FILE_DIR + "/records.tls", RECORDS)
        rng = random.Random(1234)

        for _ in range(50):
            entries = b""
            for _ in range(rng.randrange(4)):
                ext_data = rng.randbytes(rng.randrange(5))
                ext = rng.randrange(1 << 16).to_bytes(2, "big")
                ext += len(ext_data).to_bytes(2, "big") + ext_data
                entries += bytes([rng.randrange(256), len(ext)]) + ext
            context = rng.randbytes(rng.randrange(8))
            data = bytes([len(context)]) + context + len(entries).to_bytes(3, "big") + entries

            cert = gbl["parse_certificate"](data)
            expect(encode(schemas["certificate"].fields, cert)) == data


def describe_determinism():
    def generates_identical_code(expect):
        schemas = reflect_all(load(FILE_DIR + "/records.tls"), RECORDS)
        expect(render(schemas)) == render(schemas)
