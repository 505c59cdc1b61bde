"""End-to-end tests for digest.py — the memo-digest command."""

from unittest.mock import patch

import pytest

from conftest import make_srt
from memo_digest.digest import main, run_digest
from memo_digest.shared import (
    DigestConfig, DigestData,
    SUMMARY_MD, HIGHLIGHTS_MD, TASKS_MD, TAGS_TXT, CHAPTERS_MD,
    SPEAKERS_VTT, SPEAKERS_TXT, TASKS_CSV, TASKS_ICS,
)

MEETING = "We will review the budget. I need to send the report. Thanks everyone."


def _run_cli(*argv):
    with patch("sys.argv", ["memo-digest", *argv]):
        main()


@pytest.fixture
def transcript(tmp_path):
    path = tmp_path / "memo.txt"
    path.write_text(MEETING)
    return path


@pytest.fixture
def captions(tmp_path):
    path = tmp_path / "memo.srt"
    path.write_text(make_srt([(0, 5, "hello there"), (20, 25, "goodbye now")]))
    return path


# ---------------------------------------------------------------------------
# run_digest
# ---------------------------------------------------------------------------

class TestRunDigest:
    def test_with_captions(self, tmp_path, transcript, captions):
        config = DigestConfig(transcript_path=transcript, output_dir=tmp_path / "out",
                              captions_path=captions)
        config.output_dir.mkdir()
        data = DigestData()
        run_digest(config, data)

        assert [c.text for c in data.chapters] == ["hello there goodbye now"]
        assert (data.chapters[0].start, data.chapters[0].end) == (0.0, 25.0)
        assert [i.description for i in data.action_items] == [
            "will review the budget", "need to send the report",
        ]
        assert len(data.summary) == 3
        chapters_md = (config.output_dir / CHAPTERS_MD).read_text()
        assert "## 00:00:00–00:00:25" in chapters_md
        assert (config.output_dir / SPEAKERS_VTT).read_text().startswith("WEBVTT\n\n")

    def test_stage_headers_in_order(self, tmp_path, transcript, captions, capsys):
        config = DigestConfig(transcript_path=transcript, output_dir=tmp_path,
                              captions_path=captions)
        run_digest(config, DigestData())
        out = capsys.readouterr().out
        headers = ["[input] Reading inputs...",
                   "[chapters] Building chapters and speaker turns...",
                   "[text] Analyzing transcript text...",
                   "[output] Writing artifacts...",
                   "[export] Exporting checklist..."]
        positions = [out.index(h) for h in headers]
        assert positions == sorted(positions)

    def test_without_captions(self, tmp_path, transcript):
        config = DigestConfig(transcript_path=transcript, output_dir=tmp_path)
        data = DigestData()
        run_digest(config, data)
        assert data.turns == []
        assert data.chapters == []
        assert "_Add an SRT to enable chaptering._" in (tmp_path / CHAPTERS_MD).read_text()
        assert not (tmp_path / SPEAKERS_VTT).exists()

    def test_empty_caption_track(self, tmp_path, transcript):
        empty = tmp_path / "empty.srt"
        empty.write_text("")
        config = DigestConfig(transcript_path=transcript, output_dir=tmp_path,
                              captions_path=empty)
        data = DigestData()
        run_digest(config, data)
        assert data.turns == []
        assert data.chapters == []
        assert (tmp_path / CHAPTERS_MD).read_text() == (
            "# Chapters\n\n_Add an SRT to enable chaptering._\n")
        assert not (tmp_path / SPEAKERS_VTT).exists()

    def test_missing_caption_file_degrades(self, tmp_path, transcript, capsys):
        config = DigestConfig(transcript_path=transcript, output_dir=tmp_path,
                              captions_path=tmp_path / "missing.srt")
        data = DigestData()
        run_digest(config, data)
        assert not data.has_captions
        assert "Caption track not found" in capsys.readouterr().out
        assert "_Add an SRT" in (tmp_path / CHAPTERS_MD).read_text()

    def test_missing_transcript_degrades(self, tmp_path):
        config = DigestConfig(transcript_path=tmp_path / "absent.txt", output_dir=tmp_path)
        data = DigestData()
        run_digest(config, data)
        assert data.summary == [] and data.tags == [] and data.action_items == []
        assert (tmp_path / TASKS_MD).read_text() == (
            "# Action Items\n\n_No explicit tasks detected._\n")
        assert (tmp_path / TAGS_TXT).read_text() == ""
        assert not (tmp_path / TASKS_CSV).exists()

    def test_export_step_only(self, tmp_path, transcript):
        (tmp_path / TASKS_MD).write_text("- [ ] annotated task (due: Monday)\n")
        config = DigestConfig(transcript_path=transcript, output_dir=tmp_path,
                              steps=["export"])
        run_digest(config, DigestData())
        assert not (tmp_path / SUMMARY_MD).exists()
        assert "Monday" in (tmp_path / TASKS_CSV).read_text()

    def test_no_export(self, tmp_path, transcript):
        config = DigestConfig(transcript_path=transcript, output_dir=tmp_path,
                              export_tasks=False)
        run_digest(config, DigestData())
        assert (tmp_path / TASKS_MD).exists()
        assert not (tmp_path / TASKS_ICS).exists()


# ---------------------------------------------------------------------------
# main (command line)
# ---------------------------------------------------------------------------

class TestMain:
    def test_full_run(self, tmp_path, transcript, captions, capsys):
        out = tmp_path / "out"
        _run_cli("--txt", str(transcript), "--srt", str(captions), "--outdir", str(out))
        for name in (SUMMARY_MD, HIGHLIGHTS_MD, TASKS_MD, TAGS_TXT, CHAPTERS_MD,
                     SPEAKERS_VTT, SPEAKERS_TXT, TASKS_CSV, TASKS_ICS):
            assert (out / name).exists(), name
        assert "COMPLETE!" in capsys.readouterr().out

    def test_thresholds_passed_through(self, tmp_path, transcript, captions):
        out = tmp_path / "out"
        _run_cli("--txt", str(transcript), "--srt", str(captions), "--outdir", str(out),
                 "--gap", "7", "--minlen", "4")
        chapters_md = (out / CHAPTERS_MD).read_text()
        assert chapters_md.count("## ") == 2

    def test_invalid_step_exits(self, tmp_path, transcript, capsys):
        with pytest.raises(SystemExit) as exc:
            _run_cli("--txt", str(transcript), "--outdir", str(tmp_path), "--steps", "bogus")
        assert exc.value.code == 1
        assert "Invalid step(s): bogus" in capsys.readouterr().out

    def test_invalid_ratio_threshold_exits(self, tmp_path, transcript):
        with pytest.raises(SystemExit) as exc:
            _run_cli("--txt", str(transcript), "--outdir", str(tmp_path),
                     "--ratio-threshold", "0.5")
        assert exc.value.code == 1

    def test_dry_run_creates_nothing(self, tmp_path, transcript):
        out = tmp_path / "out"
        _run_cli("--txt", str(transcript), "--outdir", str(out), "--dry-run")
        assert not out.exists()

    def test_write_failure_exits_nonzero_after_other_artifacts(self, tmp_path, transcript):
        out = tmp_path / "out"
        out.mkdir()
        (out / SUMMARY_MD).mkdir()  # a directory where the file should go
        with pytest.raises(SystemExit) as exc:
            _run_cli("--txt", str(transcript), "--outdir", str(out))
        assert exc.value.code == 1
        assert (out / TASKS_MD).exists()
        assert (out / TAGS_TXT).exists()
