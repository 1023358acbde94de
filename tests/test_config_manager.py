"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from wardrobe.config import (
    ConfigError,
    ConfigManager,
    MissingConfigError,
    WardrobeConfig,
    flatten_for_env,
    require_root,
    resolve_with_precedence,
)


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager(env={})


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".wardrobe" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "Wardrobe configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, WardrobeConfig)
    assert config.root is None
    assert config.scanning.item_extension == "avatar"


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.save({"root": "/srv/outfits", "language": "fr", "logging": {"level": "INFO"}})

    env = {"WARDROBE__LOGGING__LEVEL": "DEBUG", "WARDROBE__LANGUAGE": "de"}
    cli = {"language": "es"}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.root == "/srv/outfits"
    assert config.logging.level == "DEBUG"
    # CLI overrides take precedence over environment
    assert config.language == "es"


def test_missing_file_loads_defaults(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "absent.yaml", env={})

    config = manager.load()

    assert config == WardrobeConfig()
    assert not manager.config_path.exists()


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


@pytest.mark.parametrize(
    "root",
    ["   ", "/srv/../etc", "/srv/out\x07fits", "/" + "a" * 4100],
)
def test_invalid_root_is_rejected(root: str) -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(defaults=WardrobeConfig(), file_overrides={"root": root})


def test_require_root_reports_missing_configuration() -> None:
    with pytest.raises(MissingConfigError):
        require_root(WardrobeConfig())

    assert require_root(WardrobeConfig(root="/srv/outfits")) == Path("/srv/outfits")


def test_snapshot_lists_are_normalized() -> None:
    config = WardrobeConfig(
        excluded_categories=["b", "a", "b"],
        known_category_files={"casual": ["z.avatar", "a.avatar"]},
    )

    assert config.excluded_categories == ["a", "b"]
    assert config.known_file_map() == {"casual": {"a.avatar", "z.avatar"}}


def test_file_snapshot_replaces_rather_than_merges() -> None:
    defaults = WardrobeConfig(known_category_files={"old": ["x.avatar"]})

    config = resolve_with_precedence(
        defaults=defaults,
        file_overrides={"known_category_files": {"new": ["y.avatar"]}},
    )

    assert config.known_category_files == {"new": ["y.avatar"]}


def test_item_extension_strips_leading_dot() -> None:
    config = resolve_with_precedence(
        defaults=WardrobeConfig(), file_overrides={"scanning": {"item_extension": ".Look"}}
    )

    assert config.scanning.item_extension == "Look"


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(WardrobeConfig())

    assert flat["WARDROBE__LANGUAGE"] == "en"
    assert flat["WARDROBE__SCANNING__ITEM_EXTENSION"] == "avatar"
    assert flat["WARDROBE__ROOT"] == "null"


def test_resolve_with_precedence_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=WardrobeConfig(),
            file_overrides={"logging": {"unknown": True}},
        )


def test_unsupported_language_is_rejected() -> None:
    config = resolve_with_precedence(defaults=WardrobeConfig(), file_overrides={"language": "ja"})
    assert config.language == "ja"

    with pytest.raises(ConfigError):
        resolve_with_precedence(defaults=WardrobeConfig(), file_overrides={"language": "xyz"})
