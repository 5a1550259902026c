import json

import pytest

from audio_regions.cli import main
from audio_regions.services.codec import decode, encode_wav


@pytest.fixture
def speech_wav(tmp_path, speech_buffer):
    path = tmp_path / "speech.wav"
    path.write_bytes(encode_wav(speech_buffer, is_float=True))
    return path


def test_segment_writes_region_document(speech_wav, tmp_path):
    out = tmp_path / "regions.json"

    assert main(["segment", str(speech_wav), "-o", str(out)]) == 0

    doc = json.loads(out.read_text(encoding="utf-8"))
    bounds = [(r["start"], r["end"]) for r in doc["regions"]]
    assert len(bounds) == 3
    assert bounds[0][0] == 0.0
    assert bounds[1][0] == pytest.approx(8.0, abs=0.1)
    assert bounds[2][0] == pytest.approx(20.0, abs=0.1)
    assert bounds[2][1] == 32.0


def test_segment_prints_to_stdout_with_verses(speech_wav, tmp_path, capsys):
    verses = tmp_path / "verses.json"
    verses.write_text(
        json.dumps({"regions": [{"start": 0, "end": 16, "label": "1"}, {"start": 16, "end": 32, "label": "2"}]}),
        encoding="utf-8",
    )

    code = main(["segment", str(speech_wav), "--verses", str(verses), "--time-threshold", "0.25"])

    assert code == 0
    doc = json.loads(capsys.readouterr().out)
    assert [r["start"] for r in doc["regions"]] == [0.0, 8.0, 16.0, 20.0]
    assert [r["label"] for r in doc["regions"]] == ["1", "", "2", ""]


def test_delete_cuts_range(tmp_path, make_buffer):
    source = tmp_path / "in.wav"
    target = tmp_path / "out.wav"
    source.write_bytes(encode_wav(make_buffer(5.0)))

    assert main(["delete", str(source), "1", "2", "-o", str(target)]) == 0

    assert decode(target.read_bytes()).frame_count == 400


def test_errors_exit_nonzero(tmp_path):
    garbage = tmp_path / "garbage.wav"
    garbage.write_bytes(b"\x00\x01" * 64)

    assert main(["segment", str(tmp_path / "missing.wav")]) == 1
    assert main(["segment", str(garbage)]) == 1


def test_log_level_is_case_insensitive_and_validated(tmp_path):
    assert main(["--log-level", "debug", "segment", str(tmp_path / "missing.wav")]) == 1

    with pytest.raises(SystemExit) as excinfo:
        main(["--log-level", "LOUD", "segment", str(tmp_path / "missing.wav")])
    assert excinfo.value.code == 2
