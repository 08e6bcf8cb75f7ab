from __future__ import annotations

from pathlib import Path

import pytest

from shipdoc.config.loader import ConfigError, load_config
from shipdoc.models.config_models import GeneratorSettings


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.source_directory == "./data"
    assert cfg.output_directory == "./out"
    assert cfg.mapping_file is None
    assert cfg.generator.default_service_code == "DOM.EP"
    # 未指定キーは既定値
    assert cfg.generator.default_weight == 1000
    assert cfg.generator.default_length == 30


def test_generator_section_optional(temp_workdir: Path):
    cfg_path = temp_workdir / "config" / "shipdoc.yml"
    cfg_path.write_text("source_directory: in\noutput_directory: out\n", encoding="utf-8")
    assert load_config(cfg_path).generator == GeneratorSettings()


def test_load_config_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError) as e:
        load_config(temp_workdir / "config" / "not_exists.yml")
    assert "config file not found" in str(e.value)


def test_load_config_invalid_yaml(write_config: Path):
    write_config.write_text("source_directory: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "invalid yaml" in str(e.value)


def test_load_config_missing_required(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("output_directory: ./out\n", "")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value) and "required property" in str(e.value)


def test_load_config_extra_field(write_config: Path):
    write_config.write_text(write_config.read_text(encoding="utf-8") + "extra_field: 1\n", encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value)


def test_load_config_wrong_generator_type(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace(
        "notifications_enabled: false", "notifications_enabled: sometimes"
    )
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(write_config)


def test_empty_file_fails_validation(write_config: Path):
    write_config.write_text("", encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value)


def test_every_violation_reported_with_key_path(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace(
        "signature_threshold: 200", "signature_threshold: high\n  color: red"
    )
    write_config.write_text(text + "extra_field: 1\n", encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    message = str(e.value)
    assert message.startswith("config validation failed: ")
    assert "generator.signature_threshold: 'high' is not of type 'number'" in message
    assert "'extra_field' was unexpected" in message
    assert "'color' was unexpected" in message
