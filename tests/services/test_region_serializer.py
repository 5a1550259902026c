import json

from audio_regions.domain.region import RegionParams, RegionSpan
from audio_regions.services.region_serializer import dump_regions, parse_region_params, parse_regions


def test_parse_regions_sorts_by_start():
    text = json.dumps({"regions": [{"start": 5, "end": 9, "label": "2"}, {"start": 0, "end": 5, "label": "1"}]})

    spans = parse_regions(text)

    assert [(s.start, s.end, s.label) for s in spans] == [(0.0, 5.0, "1"), (5.0, 9.0, "2")]


def test_parse_regions_accepts_nested_json_string():
    text = json.dumps({"regions": json.dumps([{"start": 1.5, "end": 2.5}])})

    assert parse_regions(text) == [RegionSpan(1.5, 2.5, "")]


def test_missing_or_empty_regions_mean_no_regions():
    assert parse_regions("") == []
    assert parse_regions(None) == []
    assert parse_regions(json.dumps({"params": {}})) == []
    assert parse_regions(json.dumps({"regions": []})) == []


def test_parse_region_params_needs_time_threshold():
    default = RegionParams()
    stored = json.dumps({"params": {"silenceThreshold": 0.01, "timeThreshold": 0.1, "segLenThreshold": 1.0}})

    assert parse_region_params("", default) is default
    assert parse_region_params(json.dumps({"params": {"silenceThreshold": 0.01}}), default) is default
    assert parse_region_params(stored, default) == RegionParams(0.01, 0.1, 1.0)


def test_dump_regions_rounds_to_five_decimals():
    text = dump_regions(RegionParams(), [RegionSpan(0.0, 1.234567891, "v1")])
    doc = json.loads(text)

    assert doc["params"] == {"silenceThreshold": 0.002, "timeThreshold": 0.05, "segLenThreshold": 0.5}
    assert doc["regions"] == [{"start": 0.0, "end": 1.23457, "label": "v1"}]


def test_zero_params_fall_back_to_defaults():
    params = RegionParams(silence_threshold=0, time_threshold=0, seg_len_threshold=0)

    assert params == RegionParams()


def test_dump_regions_without_params_writes_defaults():
    doc = json.loads(dump_regions(None, [RegionSpan(0.0, 2.0)]))

    assert doc["params"] == {"silenceThreshold": 0.002, "timeThreshold": 0.05, "segLenThreshold": 0.5}
