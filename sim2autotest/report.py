"""
Report rendering.

render_markdown(report) produces a short human-readable summary: verdict,
one table row per expectation, then any run invariant violations.
"""

from .models import CheckStatus, RunStats, ValidationReport

MAX_LISTED_VIOLATIONS = 20


def _escape_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def render_markdown(report: ValidationReport) -> str:
    """Render a ValidationReport as markdown."""
    verdict = "PASSED" if report.passed else "FAILED"
    lines = [
        f"# Validation report: {report.run_id}",
        "",
        f"Suite: **{report.suite_name}**",
        "",
        f"Result: **{verdict}** "
        f"({report.passed_count} passed, {report.failed_count} failed, {report.error_count} errors)",
        "",
    ]

    if report.outcomes:
        lines.append("| Status | Expectation | Signal | Kind | Details |")
        lines.append("|---|---|---|---|---|")
        for outcome in report.outcomes:
            lines.append(
                f"| {outcome.status.value} | {_escape_cell(outcome.expectation_id)} "
                f"| {_escape_cell(outcome.signal)} | {outcome.kind.value} "
                f"| {_escape_cell(outcome.message)} |"
            )
        lines.append("")
    else:
        lines.append("_No expectations in suite._")
        lines.append("")

    if report.run_violations:
        mode = "strict: counted as failure" if report.strict else "non-strict: informational"
        lines.append(f"## Run invariant violations ({mode})")
        lines.append("")
        for violation in report.run_violations[:MAX_LISTED_VIOLATIONS]:
            lines.append(f"- {violation}")
        hidden = len(report.run_violations) - MAX_LISTED_VIOLATIONS
        if hidden > 0:
            lines.append(f"- ... and {hidden} more")
        lines.append("")

    failing = [o for o in report.outcomes if o.status != CheckStatus.PASS]
    if failing:
        lines.append("## Failing expectations")
        lines.append("")
        for outcome in failing:
            where = f" (t={outcome.at_time:g})" if outcome.at_time is not None else ""
            lines.append(f"- `{outcome.expectation_id}`{where}: {outcome.message}")
        lines.append("")

    return "\n".join(lines)


def render_stats(stats: RunStats) -> str:
    """Render RunStats as a plain-text table."""
    lines = [
        f"run: {stats.run_id}  samples: {stats.sample_count}  duration: {stats.duration:g}",
        f"{'signal':<20} {'unit':<8} {'min':>12} {'max':>12} {'mean':>12} {'final':>12}",
    ]
    for name, s in stats.signals.items():
        lines.append(
            f"{name:<20} {(s.unit or '-'):<8} {s.min:>12.6g} {s.max:>12.6g} "
            f"{s.mean:>12.6g} {s.final:>12.6g}"
        )
    return "\n".join(lines)
