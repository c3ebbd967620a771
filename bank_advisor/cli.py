"""
Bank Rate Advisor — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (scrape + rank, history listing, model inspection).
  5. Report result to stdout.

Install and run::

    pip install -e .
    bank-advisor --help
    bank-advisor validate-config
    bank-advisor recommend --amount 100000 --term 180
    bank-advisor recommend --amount 100000 --term 180 --offline --save
    bank-advisor show-history --limit 10
    bank-advisor model-info
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="bank-advisor",
    help="Bank deposit-rate advisor — ranks banks by estimated investment return.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from bank_advisor.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from bank_advisor.utils.logging import configure_logging
    configure_logging(config.logging)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("recommend")
def recommend(
    amount: float = typer.Option(
        ...,
        "--amount",
        "-a",
        prompt="Investment amount",
        help="Amount to invest.",
    ),
    term: int = typer.Option(
        ...,
        "--term",
        "-t",
        prompt="Investment term (days)",
        help="Investment horizon in days.",
    ),
    offline: bool = typer.Option(
        False,
        "--offline",
        help="Skip scraping; rank stored history only.",
    ),
    save: bool = typer.Option(
        False,
        "--save/--no-save",
        help="Write the recommendation list to data.recommendations_file.",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Override the recommendations file path (implies --save).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Collect bank rates, rank banks for AMOUNT over TERM days, print the report.

    \b
    Steps:
      1. Load stored history (data.history_file).
      2. Scan bank homepages (unless --offline); unreadable sites get
         synthetic records.
      3. Save current + historical records back to history.
      4. Train the return model once, score and rank every record.
      5. Print the summary table and a detailed report for the best bank.

    If ranking fails the banks are ranked by raw deposit rate instead.
    """
    from bank_advisor.exceptions import InvalidArgumentError
    from bank_advisor.ingestion.scraper import BankRateScraper
    from bank_advisor.ml.estimator import ReturnEstimator
    from bank_advisor.pipeline.advise import build_advice, gather_records
    from bank_advisor.recommendations.engine import RecommendationEngine, validate_request
    from bank_advisor.reporting.export import write_recommendations
    from bank_advisor.storage.history import CsvHistoryStore

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        validate_request(amount, term)
    except InvalidArgumentError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    history = CsvHistoryStore(Path(config.data.history_file))
    source = None if offline else BankRateScraper(config.scraper)

    typer.echo("Collecting bank rate data...")
    records = gather_records(source, history)
    typer.echo(f"  Records for analysis: {len(records)}")

    engine = RecommendationEngine(
        estimator=ReturnEstimator.from_config(config.model),
        top_n=config.recommend.top_n,
    )

    typer.echo("Analyzing data and generating recommendations...")
    result = build_advice(
        records,
        amount,
        term,
        engine,
        fallback_top_n=config.recommend.fallback_top_n,
        currency=config.recommend.currency,
    )

    if result.used_fallback:
        typer.echo("[WARN] Model ranking unavailable; showing banks by deposit rate.")
    typer.echo(result.summary)
    typer.echo(f"Analysis time: {result.elapsed_s:.2f} s")
    if result.detail:
        typer.echo(result.detail)

    if save or output:
        target = Path(output) if output else Path(config.data.recommendations_file)
        try:
            written = write_recommendations(
                result.ranked, amount, target, currency=config.recommend.currency
            )
        except OSError as exc:
            typer.echo(f"[ERROR] Could not save recommendations: {exc}", err=True)
            raise typer.Exit(code=1)
        typer.echo(f"[OK] Recommendations saved to {written}")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  History file:     {config.data.history_file}")
    typer.echo(f"  Model backend:    {config.model.backend}")
    typer.echo(f"  Model artifact:   {config.model.artifact_path}")
    typer.echo(f"  Top N:            {config.recommend.top_n}")
    typer.echo(f"  Bank sources:     {len(config.scraper.sources)}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("show-history")
def show_history(
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        min=1,
        help="Maximum number of records to print.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Print stored bank records, highest deposit rate first."""
    from bank_advisor.recommendations.ranker import rank_by_deposit_rate
    from bank_advisor.storage.history import CsvHistoryStore

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    records = CsvHistoryStore(Path(config.data.history_file)).load()
    if not records:
        typer.echo(f"No history stored at {config.data.history_file}.")
        return

    header = (
        f"  {'Bank':<20}  {'Deposit':>8}  {'Loan':>8}  {'Return':>8}  "
        f"{'Date':>10}  {'Term':>5}"
    )
    typer.echo(f"History: {len(records)} record(s) in {config.data.history_file}")
    typer.echo(header)
    typer.echo("  " + "-" * (len(header) - 2))
    for r in rank_by_deposit_rate(records, limit=limit):
        typer.echo(
            f"  {r.bank_name[:20]:<20}  {r.deposit_rate:>7.2f}%  {r.loan_rate:>7.2f}%  "
            f"{r.investment_return:>7.2f}%  {r.observed_date.isoformat():>10}  "
            f"{r.term_days:>5}"
        )


@app.command("model-info")
def model_info(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Show metadata of the saved return-model artifact."""
    from bank_advisor.exceptions import ModelStoreError
    from bank_advisor.ml.model_store import JoblibModelStore

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    store = JoblibModelStore(Path(config.model.artifact_path))
    try:
        stored = store.load()
    except ModelStoreError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    if stored is None:
        typer.echo(f"No model artifact at {store.path}. Run 'recommend' to train one.")
        return

    typer.echo(f"Model artifact:   {store.path}")
    typer.echo(f"  Backend:        {stored.backend}")
    typer.echo(f"  Version:        {stored.model_version}")
    typer.echo(f"  Trained at:     {stored.trained_at}")
    typer.echo(f"  Training rows:  {stored.training_rows}")
    typer.echo(f"  Features:       {', '.join(stored.feature_cols)}")


if __name__ == "__main__":
    app()
