"""Test lyrics parsing and current-line tracking"""

import pytest

from musicpak.lyrics import (
    NO_LINE,
    LyricFormat,
    LyricLine,
    LyricsAsset,
    LyricsCursor,
    create_lyrics,
    find_current_index,
    format_lyric_time,
    parse_lyrics,
)

SYNCED = LyricFormat.LRC_LINE_BY_LINE


class TestParseLyrics:
    """Test LRC parsing"""

    def test_sorts_by_time(self):
        lines = parse_lyrics("[00:01.50]Hello\n[00:00.00]World", SYNCED)
        assert lines == [LyricLine(0, "World"), LyricLine(1500, "Hello")]

    def test_timestamp_conversion(self):
        lines = parse_lyrics("[02:03.45]x", SYNCED)
        assert lines[0].time_ms == 2 * 60000 + 3 * 1000 + 450

    def test_text_without_timestamps(self):
        assert parse_lyrics("no timestamp here", SYNCED) == []

    def test_empty_and_none(self):
        assert parse_lyrics("", SYNCED) == []
        assert parse_lyrics(None, SYNCED) == []

    def test_skips_headers_and_free_text(self, sample_lrc):
        lines = parse_lyrics(sample_lrc, SYNCED)
        assert [line.text for line in lines] == ["Intro line", "First line", "Last line"]
        assert [line.time_ms for line in lines] == [5500, 12000, 62250]

    def test_non_synced_formats_yield_nothing(self, sample_lrc):
        for fmt in (LyricFormat.NONE, LyricFormat.PLAIN_TEXT, LyricFormat.SRT, LyricFormat.ASS):
            assert parse_lyrics(sample_lrc, fmt) == []

    def test_all_lrc_formats_parse(self):
        for fmt in (LyricFormat.LRC_ES_LYRIC, LyricFormat.LRC_WORD_BY_WORD, LyricFormat.LRC_LINE_BY_LINE):
            assert len(parse_lyrics("[00:01.00]a", fmt)) == 1

    def test_unknown_format_yields_nothing(self):
        assert parse_lyrics("[00:01.00]x", 42) == []
        assert parse_lyrics("[00:01.00]x", -1) == []

    def test_int_format_is_accepted(self):
        assert parse_lyrics("[00:01.00]x", 4) == [LyricLine(1000, "x")]

    def test_strips_whitespace_and_crlf(self):
        lines = parse_lyrics("  [00:01.00]  padded  \r\n[00:02.00]next\r\n", SYNCED)
        assert lines == [LyricLine(1000, "padded"), LyricLine(2000, "next")]

    def test_only_first_tag_is_removed(self):
        lines = parse_lyrics("[00:01.00][00:05.00]Chorus", SYNCED)
        assert lines == [LyricLine(1000, "[00:05.00]Chorus")]

    def test_malformed_tags_are_dropped(self):
        text = "[0:01.00]short minutes\n[00:01]no fraction\n[00:01.000]three digits\n[00:01.00]ok"
        assert parse_lyrics(text, SYNCED) == [LyricLine(1000, "ok")]

    def test_equal_timestamps_keep_source_order(self):
        lines = parse_lyrics("[00:03.00]b\n[00:01.00]a\n[00:03.00]c", SYNCED)
        assert [line.text for line in lines] == ["a", "b", "c"]

    def test_empty_payload_is_kept(self):
        assert parse_lyrics("[00:04.00]", SYNCED) == [LyricLine(4000, "")]


class TestLyricsAsset:
    """Test lyrics asset construction"""

    def test_lines_follow_text(self, sample_lrc):
        asset = LyricsAsset(SYNCED, sample_lrc)
        assert len(asset.lines) == 3
        assert asset.is_synced

    def test_plain_text_has_no_lines(self):
        asset = LyricsAsset(LyricFormat.PLAIN_TEXT, "[00:01.00]looks timed")
        assert asset.lines == ()
        assert not asset.is_synced

    def test_data_is_utf8(self):
        assert LyricsAsset(SYNCED, "[00:01.00]héllo").data == "[00:01.00]héllo".encode("utf-8")

    def test_unknown_format_rejected(self):
        with pytest.raises(ValueError):
            LyricsAsset(42, "[00:01.00]x")

    def test_create_lyrics_blank_is_none(self):
        assert create_lyrics(None, SYNCED) is None
        assert create_lyrics("", SYNCED) is None
        assert create_lyrics("  \n\t ", SYNCED) is None

    def test_create_lyrics_keeps_text(self):
        asset = create_lyrics("[00:01.00]x\n", SYNCED)
        assert asset.text == "[00:01.00]x\n"
        assert asset.format == SYNCED

    def test_format_from_name(self):
        assert LyricFormat.from_name("lrc-line-by-line") == LyricFormat.LRC_LINE_BY_LINE
        assert LyricFormat.from_name("SRT") == LyricFormat.SRT
        with pytest.raises(ValueError):
            LyricFormat.from_name("karaoke")


class TestFindCurrentIndex:
    """Test last-at-or-before resolution"""

    LINES = [LyricLine(0, "A"), LyricLine(2000, "B")]

    def test_within_first_line(self):
        assert find_current_index(self.LINES, 500) == 0

    def test_after_last_line(self):
        assert find_current_index(self.LINES, 2500) == 1

    def test_before_first_line(self):
        assert find_current_index(self.LINES, -1) == NO_LINE

    def test_exact_boundary(self):
        assert find_current_index(self.LINES, 2000) == 1
        assert find_current_index(self.LINES, 1999) == 0

    def test_no_lines(self):
        assert find_current_index([], 1000) == NO_LINE

    def test_first_line_not_at_zero(self):
        lines = [LyricLine(5000, "A")]
        assert find_current_index(lines, 4999) == NO_LINE
        assert find_current_index(lines, 5000) == 0


class TestLyricsCursor:
    """Test edge-triggered cursor"""

    def _cursor(self):
        cursor = LyricsCursor([LyricLine(1000, "A"), LyricLine(2000, "B"), LyricLine(3000, "C")])
        changes = []
        cursor.add_listener(lambda old, new: changes.append((old, new)))
        return cursor, changes

    def test_notifies_only_on_change(self):
        cursor, changes = self._cursor()
        for position in (0, 500, 1000, 1100, 1900, 2000, 2100):
            cursor.update(position)
        assert changes == [(NO_LINE, 0), (0, 1)]

    def test_update_returns_change_flag(self):
        cursor, _ = self._cursor()
        assert cursor.update(1500) is True
        assert cursor.update(1600) is False

    def test_last_line_stays_current(self):
        cursor, _ = self._cursor()
        cursor.update(999_999)
        assert cursor.index == 2
        assert cursor.current_line.text == "C"

    def test_seek_backwards(self):
        cursor, changes = self._cursor()
        cursor.update(3500)
        cursor.update(1200)
        assert changes == [(NO_LINE, 2), (2, 0)]

    def test_reset(self):
        cursor, changes = self._cursor()
        cursor.update(2500)
        assert cursor.reset() is True
        assert cursor.index == NO_LINE
        assert cursor.current_line is None
        assert cursor.reset() is False
        assert changes[-1] == (1, NO_LINE)

    def test_empty_cursor_never_notifies(self):
        cursor = LyricsCursor()
        changes = []
        cursor.add_listener(lambda old, new: changes.append((old, new)))
        assert cursor.update(1000) is False
        assert cursor.index == NO_LINE
        assert changes == []

    def test_set_lines_resets(self):
        cursor, _ = self._cursor()
        cursor.update(2500)
        cursor.set_lines([LyricLine(0, "new")])
        assert cursor.index == NO_LINE
        cursor.update(10)
        assert cursor.current_line.text == "new"

    def test_failing_listener_does_not_block_others(self):
        cursor, changes = self._cursor()

        def broken(old, new):
            raise RuntimeError("boom")

        cursor.add_listener(broken)
        cursor.update(1000)
        assert cursor.index == 0
        assert changes == [(NO_LINE, 0)]

    def test_remove_listener(self):
        cursor, changes = self._cursor()
        listener = cursor._listeners[0]
        cursor.remove_listener(listener)
        cursor.update(1000)
        assert changes == []


class TestFormatLyricTime:
    """Test playback time formatting"""

    def test_minutes_and_seconds(self):
        assert format_lyric_time(75_000) == "01:15"
        assert format_lyric_time(0) == "00:00"

    def test_hours(self):
        assert format_lyric_time(3_725_000) == "1:02:05"

    def test_negative_is_zero(self):
        assert format_lyric_time(-5) == "00:00"
