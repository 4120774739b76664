# ./waterlogic/cli.py

from __future__ import annotations
import json
import typer
from waterlogic.core.config import settings
from waterlogic.core.exceptions import NoFeasibleSolutionError, SpecValidationError
from waterlogic.schemas.evaluation import evaluation_out
from waterlogic.schemas.specification import CustomerSpecification
from waterlogic.services.engine import intake
from waterlogic.services.engine.orchestrator import ProposalEngine
from waterlogic.services.engine.registry import list_chains, list_technologies

app = typer.Typer(help="WaterLogic proposal engine")


def _load_spec(json_path: str) -> CustomerSpecification:
    with open(json_path, "r", encoding="utf-8") as f:
        return CustomerSpecification.model_validate(json.load(f))


@app.command("evaluate")
def evaluate(
    json_path: str,
    pretty: bool = True,
    strict: bool = typer.Option(False, help="실현 가능한 체인이 없으면 exit code 3"),
    refine: bool = typer.Option(False, help="golden-section 가격 보정"),
):
    spec = _load_spec(json_path)
    cfg = settings.engine_config()
    try:
        result = ProposalEngine(config=cfg, refine_pricing=refine).run(spec)
        if strict:
            result.require_best_solution()
    except SpecValidationError as e:
        for err in e.errors:
            typer.echo(f"error: {err}", err=True)
        raise typer.Exit(code=2)
    except NoFeasibleSolutionError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=3)

    out = evaluation_out(result, cfg)
    typer.echo(out.model_dump_json(indent=2 if pretty else None, by_alias=True))


@app.command("validate")
def validate(json_path: str):
    result = intake.validate(_load_spec(json_path))
    typer.echo(result.model_dump_json(indent=2, by_alias=True))
    if not result.valid:
        raise typer.Exit(code=2)


@app.command("technologies")
def technologies(chains: bool = typer.Option(False, help="사전 정의 체인 목록 출력")):
    if chains:
        for c in list_chains():
            typer.echo(f"{c.name:<16} {' -> '.join(t.value for t in c.techs)}")
        return
    for t in list_technologies():
        typer.echo(
            f"{t.id.value:<4} {t.full_name:<32} "
            f"TSS {t.tss_removal:.2f} TDS {t.tds_removal:.2f} "
            f"BOD {t.bod_removal:.2f} COD {t.cod_removal:.2f} "
            f"{t.energy:.2f} kWh/m3"
        )


if __name__ == "__main__":
    app()
