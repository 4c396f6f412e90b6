import click
import json
import logging
import sys
from typing import Optional, Tuple
import pandas as pd
from pydantic import ValidationError
from .calculator import LossCalculator
from .database import CaseDatabase
from .dates import compute_age_at_injury, parse_date
from .importers import CaseImportError, import_case_file
from .models import CaseConfigModel, CaseInputs
from .scenarios import ECONOMIC_SCENARIOS, retirement_age_scenarios

DB_OPTION_HELP = 'Case database file (or set ECONLOSS_DB)'


def _load_config(config_file: str) -> Tuple[str, CaseInputs]:
    with open(config_file, 'r') as f:
        config_data = json.load(f)
    config_model = CaseConfigModel(**config_data)
    return config_model.name, config_model.to_case_inputs()


def _write_config(inputs: CaseInputs, name: str, output: str) -> None:
    config_model = CaseConfigModel.from_case_inputs(inputs, name)
    with open(output, 'w') as f:
        json.dump(config_model.model_dump(mode='json'), f, indent=2)


def _fail(message: str) -> None:
    click.echo(f"✗ {message}", err=True)
    sys.exit(1)


def _echo_frame(title: str, df: pd.DataFrame) -> None:
    click.echo(f"\n{title}")
    click.echo("=" * len(title))
    if df.empty:
        click.echo("  (none)")
    else:
        click.echo(df.to_string(index=False, float_format=lambda v: f"{v:,.2f}"))


@click.group()
@click.version_option(version="1.0.0")
@click.option('--verbose', '-v', is_flag=True, help='Show debug logging')
def cli(verbose: bool):
    """Forensic Economic Loss Calculator

    Projects past and future earnings losses, household services and life
    care plan costs to present value, with scenario comparisons.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')


@cli.command()
@click.option('--plaintiff', '-n', required=True, help='Plaintiff name')
@click.option('--dob', required=True, help='Date of birth (YYYY-MM-DD or MM/DD/YYYY)')
@click.option('--injury', required=True, help='Date of injury')
@click.option('--trial', required=True, help='Date of trial / valuation')
@click.option('--retirement-age', '-r', default=67.0, type=float, help='Expected retirement age')
@click.option('--base-earnings', '-b', default=75000.0, type=float, help='Pre-injury annual earnings')
@click.option('--residual-earnings', default=30000.0, type=float, help='Post-injury annual earning capacity')
@click.option('--wle', default=25.0, type=float, help='Work life expectancy in years')
@click.option('--output', '-o', default='case.json', help='Output configuration file')
def create(plaintiff: str, dob: str, injury: str, trial: str, retirement_age: float,
           base_earnings: float, residual_earnings: float, wle: float, output: str):
    """Create a new case configuration file with example life care items."""

    for label, value in (('date of birth', dob), ('date of injury', injury), ('date of trial', trial)):
        if parse_date(value) is None:
            _fail(f"Invalid {label}: {value}")

    config_data = {
        "name": plaintiff,
        "case_info": {
            "plaintiff": plaintiff,
            "dob": dob,
            "date_of_injury": injury,
            "date_of_trial": trial,
            "retirement_age": retirement_age,
        },
        "earnings_params": {
            "base_earnings": base_earnings,
            "residual_earnings": residual_earnings,
            "wle": wle,
        },
        "hh_services": {
            "active": True,
            "hours_per_week": 10,
        },
        "lcp_items": [
            {"id": 1, "category_id": "evals", "name": "Annual Physiatry Follow-up",
             "base_cost": 450.00, "freq_type": "annual", "duration": 30},
            {"id": 2, "category_id": "rx", "name": "Pain Medication",
             "base_cost": 2400.00, "freq_type": "annual", "duration": 30},
            {"id": 3, "category_id": "home", "name": "Wheelchair Ramp",
             "base_cost": 8500.00, "freq_type": "onetime", "duration": 1},
            {"id": 4, "category_id": "transport", "name": "Power Wheelchair Replacement",
             "base_cost": 12000.00, "freq_type": "recurring", "duration": 30,
             "recurrence_interval": 5},
        ],
        "past_actuals": {},
        "is_union_mode": False,
    }

    try:
        CaseConfigModel(**config_data)

        with open(output, 'w') as f:
            json.dump(config_data, f, indent=2)

        click.echo(f"✓ Created case configuration: {output}")
        click.echo(f"  Plaintiff: {plaintiff}")
        click.echo(f"  Injury: {injury}  Trial: {trial}  Retirement age: {retirement_age:g}")

    except (ValidationError, OSError) as e:
        _fail(f"Error creating configuration: {e}")


@cli.command()
@click.argument('config_file', type=click.Path(exists=True))
def validate(config_file: str):
    """Validate a case configuration file."""

    try:
        name, inputs = _load_config(config_file)
    except json.JSONDecodeError as e:
        _fail(f"Invalid JSON in configuration file: {e}")
    except ValidationError as e:
        _fail(f"Configuration validation failed: {e}")

    click.echo("✓ Configuration is valid")
    click.echo(f"  Case: {name or inputs.case_info.plaintiff}")
    click.echo(f"  Life care items: {len(inputs.lcp_items)}")
    click.echo(f"  Manual past actuals: {len(inputs.past_actuals)}")
    click.echo(f"  Household services: {'active' if inputs.hh_services.active else 'inactive'}")
    for label, value in (('Date of birth', inputs.case_info.dob),
                         ('Date of injury', inputs.case_info.date_of_injury),
                         ('Date of trial', inputs.case_info.date_of_trial)):
        if parse_date(value) is None:
            click.echo(f"  ⚠ {label} missing or unreadable; date-based figures will be zero")


@cli.command()
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--union', is_flag=True, help='Use flat-dollar union fringe benefits')
@click.option('--show-summary', '-s', is_flag=True, help='Show summary figures')
@click.option('--schedules', is_flag=True, help='Show year-by-year schedules')
@click.option('--scenarios', is_flag=True, help='Compare economic scenarios')
@click.option('--retirement-scenarios', is_flag=True, help='Compare retirement-age scenarios')
@click.option('--recompute-ancillary', is_flag=True,
              help='Re-run household and life care totals under each scenario')
@click.option('--as-of', default=None, help='Date used for current age (defaults to today)')
def calculate(config_file: str, union: bool, show_summary: bool, schedules: bool, scenarios: bool,
              retirement_scenarios: bool, recompute_ancillary: bool, as_of: Optional[str]):
    """Calculate economic losses for a case configuration file."""

    try:
        name, inputs = _load_config(config_file)
    except json.JSONDecodeError as e:
        _fail(f"Invalid JSON in configuration file: {e}")
    except ValidationError as e:
        _fail(f"Configuration validation failed: {e}")

    if union:
        inputs.is_union_mode = True

    scenario_table = ()
    if scenarios:
        scenario_table += ECONOMIC_SCENARIOS
    if retirement_scenarios:
        scenario_table += retirement_age_scenarios(compute_age_at_injury(inputs.case_info),
                                                   inputs.earnings_params.wle)

    calculator = LossCalculator(inputs, scenario_table, parse_date(as_of), recompute_ancillary)
    summary = calculator.calculate_summary_statistics()

    click.echo(f"\n📊 Economic Loss Summary for {name or inputs.case_info.plaintiff or 'Unnamed case'}")
    click.echo("=" * 50)
    click.echo(f"Past Earnings Loss:        ${summary['total_past_loss']:,.2f}")
    click.echo(f"Future Earnings Loss (PV): ${summary['total_future_pv']:,.2f}")
    click.echo(f"Household Services (PV):   ${summary['household_services_pv']:,.2f}")
    click.echo(f"Life Care Plan (PV):       ${summary['life_care_plan_pv']:,.2f}")
    click.echo(f"Grand Total:               ${summary['grand_total']:,.2f}")

    if show_summary:
        click.echo(f"\nAge at injury:             {summary['age_at_injury']:.1f}")
        click.echo(f"Past years:                {summary['past_years']:.2f}")
        click.echo(f"Years to final separation: {summary['years_to_final_separation']:.2f}")
        click.echo(f"Work life factor:          {summary['work_life_factor']:.2f}%")
        click.echo(f"Full multiplier:           {summary['full_multiplier']:.4f}")
        click.echo(f"Realized multiplier:       {summary['realized_multiplier']:.4f}")
        click.echo(f"Future loss (nominal):     ${summary['total_future_nominal']:,.2f}")
        click.echo(f"Life care plan (nominal):  ${summary['life_care_plan_nominal']:,.2f}")

        click.echo("\n📋 Life Care Plan by Category:")
        for category in calculator.get_cost_by_category().values():
            click.echo(f"  {category['label']}: ${category['category_present_value_total']:,.2f} PV "
                       f"({len(category['items'])} items)")

    if schedules:
        _echo_frame("Past Loss Schedule", calculator.build_past_schedule())
        _echo_frame("Future Loss Schedule", calculator.build_future_schedule())
        _echo_frame("Household Services Schedule", calculator.build_household_schedule())
        _echo_frame("Life Care Plan Schedule", calculator.build_lcp_schedule())

    if scenario_table:
        _echo_frame("Scenario Comparison", calculator.build_scenario_table())

    qc = calculator.quality_control_validation()
    if not qc['reconciliation_passes']:
        failed = [check for check, result in qc['checks'].items() if not result['passes']]
        click.echo(f"\n⚠ Reconciliation failed: {', '.join(failed)}", err=True)


@cli.command(name='import')
@click.argument('case_file', type=click.Path(exists=True))
@click.option('--name', default=None, help='Name to save the case under')
@click.option('--db', 'db_path', default='econloss_cases.db', envvar='ECONLOSS_DB', help=DB_OPTION_HELP)
def import_case(case_file: str, name: Optional[str], db_path: str):
    """Import a JSON or CSV case file into the case database."""

    try:
        imported_name, inputs = import_case_file(case_file)
        case_name = name or imported_name
        CaseDatabase(db_path).save_case(case_name, inputs)
    except CaseImportError as e:
        _fail(f"Could not import {case_file}: {e}")
    except Exception as e:
        _fail(f"Error saving imported case: {e}")

    click.echo(f"✓ Imported \"{case_name}\"")


@cli.command(name='list')
@click.option('--db', 'db_path', default='econloss_cases.db', envvar='ECONLOSS_DB', help=DB_OPTION_HELP)
def list_cases(db_path: str):
    """List saved cases."""

    cases = CaseDatabase(db_path).list_cases()
    if not cases:
        click.echo("No saved cases")
        return
    for case in cases:
        click.echo(f"  {case['name']} ({case['plaintiff'] or 'no plaintiff'}) - updated {case['updated_at']}")


@cli.command()
@click.argument('name')
@click.option('--output', '-o', default=None, help='Output configuration file')
@click.option('--db', 'db_path', default='econloss_cases.db', envvar='ECONLOSS_DB', help=DB_OPTION_HELP)
def export(name: str, output: Optional[str], db_path: str):
    """Write a saved case out as a configuration file."""

    inputs = CaseDatabase(db_path).load_case(name)
    if inputs is None:
        _fail(f"Case not found: {name}")

    output = output or f"{name.replace(' ', '_').lower()}.json"
    try:
        _write_config(inputs, name, output)
    except ValidationError as e:
        _fail(f"Saved case does not validate: {e}")
    click.echo(f"✓ Exported \"{name}\" to {output}")


@cli.command()
@click.argument('name')
@click.option('--db', 'db_path', default='econloss_cases.db', envvar='ECONLOSS_DB', help=DB_OPTION_HELP)
def delete(name: str, db_path: str):
    """Delete a saved case."""

    if CaseDatabase(db_path).delete_case(name):
        click.echo(f"✓ Deleted \"{name}\"")
    else:
        _fail(f"Case not found: {name}")


@cli.command()
def examples():
    """Show example configuration format and usage."""

    example_config = {
        "name": "Smith v. Acme",
        "case_info": {
            "plaintiff": "John Smith",
            "dob": "1985-01-15",
            "date_of_injury": "2020-03-10",
            "date_of_trial": "2024-06-15",
            "retirement_age": 67
        },
        "earnings_params": {
            "base_earnings": 75000,
            "residual_earnings": 30000,
            "wle": 25,
            "wage_growth": 3.5,
            "discount_rate": 4.25
        },
        "hh_services": {"active": True, "hours_per_week": 15, "hourly_rate": 25},
        "lcp_items": [
            {"id": 1, "category_id": "rx", "name": "Pain Medication", "base_cost": 2400,
             "freq_type": "annual", "duration": 30}
        ],
        "past_actuals": {"2021": "18000"}
    }

    click.echo("📋 Example Case Configuration:")
    click.echo("=" * 50)
    click.echo(json.dumps(example_config, indent=2))

    click.echo("\n💡 Usage Examples:")
    click.echo("=" * 20)
    click.echo("# Create a new configuration file:")
    click.echo("econloss create -n 'Jane Doe' --dob 1985-01-15 --injury 2020-03-10 --trial 2024-06-15")
    click.echo()
    click.echo("# Validate configuration:")
    click.echo("econloss validate case.json")
    click.echo()
    click.echo("# Calculate with schedules and scenario comparison:")
    click.echo("econloss calculate case.json --show-summary --schedules --scenarios")
    click.echo()
    click.echo("# Import a JSON/CSV case and list saved cases:")
    click.echo("econloss import intake.csv && econloss list")


if __name__ == '__main__':
    cli()
