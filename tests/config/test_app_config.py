#!filepath: tests/config/test_app_config.py
import pytest
import yaml
from pydantic import ValidationError

from streamingml import AppConfig
from streamingml.config.app_config import _ENV_OVERRIDES, default_config_path
from streamingml.config.classifier_config import ClassifierConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in _ENV_OVERRIDES:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def no_dotenv(tmp_path):
    return str(tmp_path / "missing.env")


def test_load_bundled_defaults(no_dotenv):
    cfg = AppConfig.load(env_file=no_dotenv)

    assert cfg.classifier.prediction_samples == 1000
    assert cfg.classifier.posterior == "laplace"
    assert cfg.classifier.confidence_metric == "mean"
    assert cfg.log.dir is None
    assert cfg.log.level == "INFO"


def test_load_custom_yaml(tmp_path, no_dotenv):
    path = tmp_path / "cfg.yml"
    path.write_text(
        yaml.safe_dump({"classifier": {"prediction_samples": 200, "posterior": "variational"}}),
        encoding="utf-8",
    )

    cfg = AppConfig.load(str(path), env_file=no_dotenv)

    assert cfg.classifier.prediction_samples == 200
    assert cfg.classifier.posterior == "variational"
    # 未指定的 section 走默认值
    assert cfg.log.rotation == "1 day"


def test_env_overrides_yaml(monkeypatch, no_dotenv):
    monkeypatch.setenv("STREAMINGML_PREDICTION_SAMPLES", "50")
    monkeypatch.setenv("STREAMINGML_CONFIDENCE_METRIC", "std")

    cfg = AppConfig.load(env_file=no_dotenv)

    assert cfg.classifier.prediction_samples == 50
    assert cfg.classifier.confidence_metric == "std"


def test_dotenv_file(tmp_path, monkeypatch):
    env = tmp_path / ".env"
    env.write_text("STREAMINGML_LOG_LEVEL=DEBUG\n", encoding="utf-8")
    # load_dotenv 会写 os.environ：先登记，teardown 时恢复为未设置
    monkeypatch.setenv("STREAMINGML_LOG_LEVEL", "")
    monkeypatch.delenv("STREAMINGML_LOG_LEVEL")

    cfg = AppConfig.load(env_file=str(env))

    assert cfg.log.level == "DEBUG"


def test_missing_file(tmp_path, no_dotenv):
    with pytest.raises(FileNotFoundError):
        AppConfig.load(str(tmp_path / "nope.yml"), env_file=no_dotenv)


def test_bundled_file_sections():
    with open(default_config_path(), encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    assert set(raw) == {"log", "classifier"}


@pytest.mark.parametrize(
    "field, value",
    [
        ("prediction_samples", 0),
        ("posterior", "laplacian"),
        ("prior_variance", -1.0),
        ("optimizer", "rmsprop"),
        ("confidence_metric", "median"),
    ],
)
def test_classifier_config_validation(field, value):
    with pytest.raises(ValidationError):
        ClassifierConfig(**{field: value})


def test_classifier_config_frozen():
    cfg = ClassifierConfig()

    with pytest.raises(ValidationError):
        cfg.prediction_samples = 5
