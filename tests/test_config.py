import pytest
import yaml

from trackview.config import CONFIG_ENV_VAR, TrackviewConfig, ViewConfig, load_config


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


def test_defaults_without_config_file():
    config = load_config()

    assert config.view == ViewConfig()
    assert config.view.default_item_limit == 10
    assert config.view.page_item_limit == 20
    assert config.view.show_ahead_commits
    assert config.view.show_date_markers


def test_default_file_is_read(tmp_path):
    (tmp_path / ".trackview.yaml").write_text(
        "view:\n  default_item_limit: 5\n  show_ahead_commits: false\n"
    )

    config = load_config()

    assert config.view.default_item_limit == 5
    assert config.view.page_item_limit == 20
    assert not config.view.show_ahead_commits


def test_explicit_path(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text("view:\n  page_item_limit: 7\n")

    assert load_config(str(path)).view.page_item_limit == 7


def test_env_var(tmp_path, monkeypatch):
    path = tmp_path / "from-env.yaml"
    path.write_text("view:\n  show_date_markers: false\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

    assert not load_config().view.show_date_markers


def test_explicit_missing_file_is_an_error(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_empty_file(tmp_path):
    (tmp_path / ".trackview.yaml").write_text("# nothing here\n")

    assert load_config() == TrackviewConfig()


def test_unknown_sections_are_kept(tmp_path):
    (tmp_path / ".trackview.yaml").write_text("other:\n  key: value\n")

    config = load_config()

    assert config.get_section("other") == {"key": "value"}
    assert config.get_section("missing") == {}
    assert config.view == ViewConfig()


@pytest.mark.parametrize(
    "content",
    [
        "view:\n  default_item_limit: -1\n",
        "view:\n  page_item_limit: many\n",
        "view:\n  show_ahead_commits: 3\n",
        "view: [1, 2]\n",
        "- just\n- a list\n",
    ],
)
def test_invalid_values(tmp_path, content):
    (tmp_path / ".trackview.yaml").write_text(content)

    with pytest.raises(ValueError):
        load_config()


def test_invalid_yaml(tmp_path):
    (tmp_path / ".trackview.yaml").write_text("view: [unclosed\n")

    with pytest.raises(yaml.YAMLError):
        load_config()
