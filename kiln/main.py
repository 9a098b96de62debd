"""
kiln — CLI entrypoint.

Usage:
    kiln --help
    kiln generate ./my-template ./out
    kiln generate https://github.com/org/template.git ./out --answers '{"name": "demo"}'
    kiln check ./my-template
"""

from __future__ import annotations

import json
import sys

import click

from kiln import __version__
from kiln.core.observability.logging_config import LogSettings, setup_logging

_STATUS_COLORS = {
    "created": "green",
    "overwritten": "green",
    "skipped": "yellow",
    "ignored": None,
    "failed": "red",
}


@click.group()
@click.version_option(version=__version__, prog_name="kiln")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, debug: bool) -> None:
    """kiln — generate projects from parameterized templates."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug

    # ── Logging setup (once, at process start) ──────────────────
    settings = LogSettings.from_flags(debug=debug, verbose=verbose, quiet=quiet)
    setup_logging(
        level=settings.level,
        log_file=settings.log_file,
        log_file_level=settings.log_file_level,
    )


@cli.command()
@click.argument("template")
@click.argument("output_dir", type=click.Path(file_okay=False))
@click.option("--force", "-f", is_flag=True, help="Reuse an existing output directory.")
@click.option("--answers", "answers_json", default=None, metavar="JSON", help="Answers as a JSON object.")
@click.option("--stdin", "read_stdin", is_flag=True, help="Read a JSON object of answers from stdin.")
@click.option("--no-input", is_flag=True, help="Never prompt; accept every default.")
@click.option("--skip-hooks-check", is_flag=True, help="Run template hooks without asking.")
@click.option("--skip-overwrite-check", is_flag=True, help="Overwrite existing files without asking.")
@click.option("--no-overwrite", is_flag=True, help="Keep existing files without asking.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def generate(
    ctx: click.Context,
    template: str,
    output_dir: str,
    force: bool,
    answers_json: str | None,
    read_stdin: bool,
    no_input: bool,
    skip_hooks_check: bool,
    skip_overwrite_check: bool,
    no_overwrite: bool,
    as_json: bool,
) -> None:
    """Generate a project from TEMPLATE into OUTPUT_DIR.

    TEMPLATE is a local directory or a git repository URL.

    Examples:

        kiln generate ./templates/service ./my-service

        kiln generate git@github.com:org/tpl.git ./out --no-input

        echo '{"name": "demo"}' | kiln generate ./tpl ./out --stdin
    """
    from kiln.core.engine.materializer import ConflictPolicy
    from kiln.core.services.prompts import ClickPrompter, DefaultsPrompter
    from kiln.core.use_cases.generate import run_generate

    if skip_overwrite_check and no_overwrite:
        raise click.UsageError("--skip-overwrite-check and --no-overwrite are mutually exclusive.")

    if skip_overwrite_check:
        policy = ConflictPolicy.OVERWRITE
    elif no_overwrite:
        policy = ConflictPolicy.SKIP
    else:
        policy = ConflictPolicy.PROMPT

    stdin_text = click.get_text_stream("stdin").read() if read_stdin else None

    result = run_generate(
        template=template,
        output_dir=output_dir,
        force=force,
        answers_json=answers_json,
        stdin_text=stdin_text,
        skip_hooks_check=skip_hooks_check,
        conflict_policy=policy,
        prompter=DefaultsPrompter() if no_input else ClickPrompter(),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if result.error:
        click.secho(f"❌ [{result.error_phase}] {result.error}", fg="red", err=True)
        sys.exit(result.exit_code or 1)

    report = result.report
    assert report is not None  # guaranteed after error check above
    quiet = ctx.obj.get("quiet", False)

    if not quiet:
        for outcome in report.outcomes:
            if outcome.status == "ignored" and not ctx.obj.get("verbose"):
                continue
            click.secho(f"   {outcome.marker} {outcome.message}", fg=_STATUS_COLORS[outcome.status])
        click.echo()
        click.echo(
            f"   Created: {report.count('created')} | "
            f"Overwritten: {report.count('overwritten')} | "
            f"Skipped: {report.count('skipped')} | "
            f"Ignored: {report.count('ignored')} | "
            f"Failed: {report.failed}"
        )

    if report.failed:
        click.secho(f"⚠️  {report.failed} entr{'y' if report.failed == 1 else 'ies'} failed:", fg="yellow")
        for outcome in report.failures:
            click.echo(f"   • {outcome.error}")

    click.secho(f"Template generation completed successfully in {result.output_dir}.", fg="green")


@cli.command()
@click.argument("template")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def check(template: str, as_json: bool) -> None:
    """Validate TEMPLATE's configuration without generating anything."""
    from kiln.core.use_cases.check import check_template

    result = check_template(template)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.config is not None  # guaranteed when valid
        click.secho("✅ Template is valid", fg="green", bold=True)
        click.echo(f"   Config: {result.config_file}")
        click.echo(f"   Questions: {len(result.config.questions)}")
        click.echo(f"   Template suffix: {result.config.template_suffix}")
    else:
        click.secho("❌ Template errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)


if __name__ == "__main__":
    cli()
