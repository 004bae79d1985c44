"""Tests for the 8-byte report encoder."""

import pytest

from patlite_lr6_mcp.models.commands import (
    LedChannel,
    LedState,
    make_buzzer,
    make_light,
    make_raw_report,
    make_reset,
    make_tower,
)
from patlite_lr6_mcp.protocol.report import (
    KEEP_REPORT,
    RESET_REPORT,
    build_report,
    encode,
    pack_nibbles,
)


def _nibble_position(channel: LedChannel) -> tuple[int, int]:
    """Return (byte offset, shift) of a channel's LED nibble."""
    return 4 + channel // 2, 4 if channel % 2 == 0 else 0


def test_pack_nibbles():
    assert pack_nibbles(0x3, 0x3) == 0x33
    assert pack_nibbles(0xE, 0xF) == 0xEF
    assert pack_nibbles(0x1, 0x0) == 0x10


def test_build_report_layout():
    report = build_report(0x33, 0xEF, 0x12, 0x34, 0x50)
    assert report == bytes([0x00, 0x00, 0x33, 0xEF, 0x12, 0x34, 0x50, 0x00])


def test_keep_and_reset_reports():
    assert KEEP_REPORT == bytes([0, 0, 0x0F, 0, 0xFF, 0xFF, 0xF0, 0])
    assert RESET_REPORT == bytes(8)


def test_light_red_on_matches_raw_example():
    """`light red on` is the documented raw report 0 0 15 0 31 255 240 0."""
    assert encode(make_light("red", "on")) == bytes([0, 0, 15, 0, 31, 255, 240, 0])


def test_light_white_uses_high_nibble():
    report = encode(make_light("white", "pattern2"))
    assert report == bytes([0, 0, 0x0F, 0, 0xFF, 0xFF, 0x30, 0])


def test_light_blue_off():
    report = encode(make_light("blue", "off"))
    assert report == bytes([0, 0, 0x0F, 0, 0xFF, 0xF0, 0xF0, 0])


@pytest.mark.parametrize("channel", list(LedChannel))
@pytest.mark.parametrize("state", list(LedState))
def test_light_only_touches_its_channel(channel, state):
    """A light report differs from the keep baseline only in one nibble."""
    report = encode(make_light(channel, state))
    offset, shift = _nibble_position(channel)

    assert len(report) == 8
    for i, (got, keep) in enumerate(zip(report, KEEP_REPORT)):
        if i == offset:
            assert (got >> shift) & 0x0F == state
            assert got & ~(0x0F << shift) & 0xFF == keep & ~(0x0F << shift) & 0xFF
        else:
            assert got == keep


def test_tower_packs_in_order():
    report = encode(make_tower(["on", "off", "pattern1", "off", "keep"]))
    assert report == bytes([0, 0, 0x0F, 0, 0x10, 0x20, 0xF0, 0])


def test_tower_all_distinct():
    report = encode(make_tower([1, 2, 3, 4, 5]))
    assert report[4:7] == bytes([0x12, 0x34, 0x50])


def test_tower_encoding_is_idempotent():
    command = make_tower(["pattern4", "on", "off", "keep", "pattern3"])
    assert encode(command) == encode(command)
    assert encode(command) == encode(make_tower(["pattern4", "on", "off", "keep", "pattern3"]))


def test_buzzer_pattern_with_default_pitches():
    """Pattern 2 with limit 3 and the default 0xE/0xF pitch pair."""
    report = encode(make_buzzer("pattern2", 3))
    assert report == bytes([0, 0, 0x33, 0xEF, 0xFF, 0xFF, 0xF0, 0])


def test_buzzer_explicit_on_pitches():
    report = encode(make_buzzer("on", pitches=[0x2, 0x6]))
    assert report[2] == 0x01
    assert report[3] == 0x26
    assert report[4:7] == KEEP_REPORT[4:7]


def test_buzzer_single_pitch():
    report = encode(make_buzzer("on", 5, [0x2]))
    assert report[2] == 0x51
    assert report[3] == 0x2F


def test_buzzer_off_is_all_zero():
    report = encode(make_buzzer("off"))
    assert report[2] == 0x00
    assert report[3] == 0x00
    assert report[4:7] == KEEP_REPORT[4:7]


def test_raw_report_is_identity():
    data = [0, 0, 15, 0, 31, 255, 240, 0]
    assert encode(make_raw_report(data)) == bytes(data)


def test_reset_is_constant():
    """Reset never depends on what was encoded before."""
    first = encode(make_reset())
    encode(make_tower(["on"] * 5))
    encode(make_buzzer("pattern4", 15, [1, 2]))
    assert encode(make_reset()) == first == bytes(8)


def test_encode_rejects_unknown_type():
    with pytest.raises(TypeError):
        encode("light red on")
