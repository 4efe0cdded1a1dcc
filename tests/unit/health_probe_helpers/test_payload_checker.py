from connwatch.health_probe_helpers import has_ok_marker


def test_marker_comparison_ignores_case_and_whitespace():
    assert has_ok_marker({"status": " OK "})
    assert has_ok_marker({"health": "ok"}, field="health")


def test_marker_rejects_other_shapes():
    assert not has_ok_marker(None)
    assert not has_ok_marker(["ok"])
    assert not has_ok_marker({"status": True})
    assert not has_ok_marker({"status": "error"})
    assert not has_ok_marker({})
