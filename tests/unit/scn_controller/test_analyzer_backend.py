import pytest

from scn_common.errors import ConfigurationError
from scn_controller.backend import DEFAULT_BACKEND, ReferenceAnalyzer, load_backend


pytestmark = pytest.mark.unit_controller


def test_default_backend_reference_loads_reference_analyzer():
    assert isinstance(load_backend(DEFAULT_BACKEND), ReferenceAnalyzer)


def test_test_backends_are_instantiated():
    backend = load_backend("tests.helpers.slow_analyzer:SlowAnalyzer")
    assert isinstance(backend, ReferenceAnalyzer)
    assert backend.max_wait == 10.0


@pytest.mark.parametrize("reference", ["no_colon", ":Attr", "module:"])
def test_malformed_reference_is_rejected(reference):
    with pytest.raises(ConfigurationError, match="module:attribute"):
        load_backend(reference)


def test_missing_module_or_attribute_is_a_configuration_error():
    with pytest.raises(ConfigurationError) as excinfo:
        load_backend("scn_controller.backend:DoesNotExist")
    assert excinfo.value.context["backend"] == "scn_controller.backend:DoesNotExist"
    with pytest.raises(ConfigurationError):
        load_backend("scn_not_a_module:Analyzer")
