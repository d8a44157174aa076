from choreo.diagnostics import Diagnostics
from choreo.models import SceneWarning


class _FakeLogger:
    def __init__(self):
        self.logged = []

    def log(self, message):
        self.logged.append(message)


def test_records_are_collected_in_order():
    diagnostics = Diagnostics()
    diagnostics.warn("validating", "field_fallback", "unknown animation", actor_id="freud", field="animation", value=3)
    diagnostics.info("decoding", "missing_reasoning", "no reasoning")
    assert diagnostics.codes() == ["field_fallback", "missing_reasoning"]
    assert len(diagnostics) == 2
    first, second = diagnostics.records()
    assert first.value == "3"
    assert second.level == "info"


def test_records_are_mirrored_to_logger():
    logger = _FakeLogger()
    diagnostics = Diagnostics(logger)
    diagnostics.extend([SceneWarning("guidelines", "empty_dialogue", "empty dialogue", actor_id="jung")])
    assert logger.logged == ["warning:guidelines:empty_dialogue:jung: empty dialogue"]
    assert [w.code for w in diagnostics] == ["empty_dialogue"]
