import pytest

from goestools.config import (
    Config,
    PublisherConfig,
    StatsPublisherConfig,
)


def write(tmp_path, text):
    path = tmp_path / "goesrecv.conf"
    path.write_text(text)
    return path


def test_defaults_and_inproc_endpoints(tmp_path):
    config = Config.load(write(tmp_path, ""))
    assert config.demodulator.stats_publisher.bind == ["inproc://demodulator_stats"]
    assert config.decoder.stats_publisher.bind == ["inproc://decoder_stats"]
    assert config.demodulator.decimation == 1
    assert config.airspy.gain == 18
    assert config.rtlsdr.gain == 30
    assert config.costas.max_deviation == 20000
    assert config.airspy.frequency == 0


def test_lrit_mode_sets_frequency(tmp_path):
    config = Config.load(write(tmp_path, '[demodulator]\nmode = "lrit"\nsource = "rtlsdr"\n'))
    assert config.demodulator.downlink_type == "lrit"
    assert config.demodulator.source == "rtlsdr"
    assert config.airspy.frequency == 1691000000
    assert config.rtlsdr.frequency == 1691000000


def test_hrit_mode_keeps_explicit_frequency(tmp_path):
    text = '[demodulator]\nmode = "hrit"\n[rtlsdr]\nfrequency = 1694000000\n'
    config = Config.load(write(tmp_path, text))
    assert config.rtlsdr.frequency == 1694000000
    assert config.airspy.frequency == 1694100000


def test_stats_publisher_bind_comes_first(tmp_path):
    text = (
        '[demodulator.stats_publisher]\nbind = "tcp://0.0.0.0:6001"\nsend_buffer = 2097152\n'
    )
    config = Config.load(write(tmp_path, text))
    stats = config.demodulator.stats_publisher
    assert stats == StatsPublisherConfig(
        ["tcp://0.0.0.0:6001", "inproc://demodulator_stats"], 2097152
    )


def test_sample_publisher(tmp_path):
    text = '[costas.sample_publisher]\nbind = "tcp://0.0.0.0:5002"\n'
    config = Config.load(write(tmp_path, text))
    assert config.costas.sample_publisher == PublisherConfig("tcp://0.0.0.0:5002", None)


def test_publisher_requires_bind(tmp_path):
    with pytest.raises(ValueError, match='"bind"'):
        Config.load(write(tmp_path, "[rrc.sample_publisher]\nsend_buffer = 10\n"))


def test_invalid_top_level_key():
    with pytest.raises(ValueError, match="Invalid configuration key: bogus"):
        Config.from_dict({"bogus": {}})


def test_invalid_section_key():
    with pytest.raises(ValueError, match="Invalid configuration key: volume"):
        Config.from_dict({"airspy": {"volume": 3}})


def test_nanomsg_requires_sample_rate():
    with pytest.raises(ValueError, match="Key not set: sample_rate"):
        Config.from_dict({"nanomsg": {"connect": "tcp://1.2.3.4:5000"}})


def test_nanomsg_section():
    config = Config.from_dict(
        {"nanomsg": {"connect": "tcp://1.2.3.4:5000", "sample_rate": 2400000}}
    )
    assert config.nanomsg.connect == "tcp://1.2.3.4:5000"
    assert config.nanomsg.sample_rate == 2400000


def test_costas_max_deviation_truncates_and_validates():
    assert Config.from_dict({"costas": {"max_deviation": 1500.9}}).costas.max_deviation == 1500
    with pytest.raises(ValueError, match="max_deviation"):
        Config.from_dict({"costas": {"max_deviation": 0.5}})


def test_agc_limits_are_single_precision():
    config = Config.from_dict({"agc": {"min": 0.1, "max": 10}})
    assert config.agc.min == pytest.approx(0.1, rel=1e-6)
    assert config.agc.min != 0.1
    assert config.agc.max == 10.0


def test_type_mismatch_rejected():
    with pytest.raises(ValueError):
        Config.from_dict({"rtlsdr": {"gain": "high"}})
    with pytest.raises(ValueError):
        Config.from_dict({"airspy": {"bias_tee": 1}})


def test_malformed_toml(tmp_path):
    with pytest.raises(ValueError):
        Config.load(write(tmp_path, "[demodulator\nmode = \n"))


def test_load_matches_from_dict(tmp_path):
    text = (
        '[demodulator]\nmode = "hrit"\ndecimation = 2\n'
        '[rtlsdr]\ngain = 5\nbias_tee = true\ndevice_index = 1\n'
        '[monitor]\nstatsd_address = "udp4://localhost:8125"\n'
    )
    data = {
        "demodulator": {"mode": "hrit", "decimation": 2},
        "rtlsdr": {"gain": 5, "bias_tee": True, "device_index": 1},
        "monitor": {"statsd_address": "udp4://localhost:8125"},
    }
    assert Config.load(write(tmp_path, text)) == Config.from_dict(data)