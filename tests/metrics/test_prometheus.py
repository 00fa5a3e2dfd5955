from llmwatch.metrics import MetricsStore, render_prometheus
from llmwatch.metrics.prometheus import escape_label_value, format_value
from llmwatch.models import MetricRecord


def test_format_value_drops_integral_fraction():
    assert format_value(100.0) == "100"
    assert format_value(3) == "3"
    assert format_value(0.25) == "0.25"
    assert format_value(float("nan")) == "NaN"


def test_escape_label_value():
    assert escape_label_value('a"b\\c\nd') == 'a\\"b\\\\c\\nd'


def test_empty_store_only_exposes_counters():
    text = render_prometheus(MetricsStore())

    assert text.endswith("\n")
    assert "llm_requests_total 0" in text
    assert "llm_errors_total 0" in text
    assert "llm_request_duration_ms" not in text


def test_single_record_exposition_lines():
    store = MetricsStore()
    store.append(
        MetricRecord(
            provider="x",
            model="y",
            latency_ms=100.0,
            total_tokens=42,
            cost=0.5,
        )
    )

    lines = render_prometheus(store).splitlines()

    assert "llm_requests_total 1" in lines
    assert "llm_errors_total 0" in lines
    assert 'llm_request_duration_ms{provider="x",model="y",stat="avg"} 100' in lines
    assert 'llm_request_duration_ms{provider="x",model="y",stat="latest"} 100' in lines
    assert 'llm_requests_total{provider="x",model="y",status="success"} 1' in lines
    assert 'llm_requests_total{provider="x",model="y",status="error"} 0' in lines
    assert 'llm_request_cost_usd{provider="x",model="y"} 0.5' in lines
    assert 'llm_tokens_total{provider="x",model="y"} 42' in lines
    assert "# TYPE llm_request_duration_ms gauge" in lines


def test_labeled_samples_follow_their_family_type_line():
    store = MetricsStore()
    store.append(MetricRecord(provider="a", model="m", latency_ms=1.0, error="boom"))

    lines = render_prometheus(store).splitlines()

    type_line = lines.index("# TYPE llm_requests_total counter")
    errors_type = lines.index("# TYPE llm_errors_total counter")
    labeled = lines.index('llm_requests_total{provider="a",model="m",status="error"} 1')
    assert type_line < labeled < errors_type
    assert "llm_errors_total 1" in lines
