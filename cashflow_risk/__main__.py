"""
Cash Flow Risk Engine - command line entry point

Usage:
    python -m cashflow_risk --demo                         # Enhanced forecast on a demo ledger
    python -m cashflow_risk --history history.json         # {date, amount} records from a file
    python -m cashflow_risk --demo --scenario --risk-level high
"""

import argparse
import json
import logging
import sys
from datetime import date

from config.settings import get_config

from .demo_data import DemoDataGenerator, INDUSTRY_PROFILES
from .forecasting import CashFlowForecaster, RiskLevel, ScenarioAssumptions

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cashflow_risk',
        description='Cash flow forecasting and risk quantification'
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '--demo',
        action='store_true',
        help='Forecast a generated demo ledger'
    )
    source.add_argument(
        '--history',
        help='JSON file with a list of {"date", "amount"} records'
    )
    parser.add_argument(
        '--industry',
        default='professional_services',
        choices=sorted(INDUSTRY_PROFILES),
        help='Demo ledger industry profile (default: professional_services)'
    )
    parser.add_argument(
        '--months',
        type=int,
        default=None,
        help='Forecast horizon in months (default: from config)'
    )
    parser.add_argument(
        '--confidence',
        type=float,
        default=None,
        help='Confidence interval level: 0.90, 0.95 or 0.99 (default: from config)'
    )
    parser.add_argument(
        '--simulations',
        type=int,
        default=None,
        help='Monte Carlo path count (default: from config)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for demo data and simulation'
    )
    parser.add_argument(
        '--scenario',
        action='store_true',
        help='Run the monthly income/expense scenario forecast (requires --demo)'
    )
    parser.add_argument(
        '--risk-level',
        default='medium',
        choices=['low', 'medium', 'high'],
        help='Scenario risk level (default: medium)'
    )
    parser.add_argument(
        '--include-paths',
        action='store_true',
        help='Include the simulated final values in the output'
    )
    return parser


def main(argv=None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    settings = get_config()

    logging.basicConfig(
        level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        stream=sys.stderr
    )

    if args.scenario and not args.demo:
        logger.error("--scenario needs a ledger; use it together with --demo")
        return 2

    overrides = {}
    if args.simulations is not None:
        overrides['MONTE_CARLO_SIMULATIONS'] = args.simulations
    if args.seed is not None:
        overrides['MONTE_CARLO_SEED'] = args.seed
    if overrides:
        settings = type('CliConfig', (settings,), overrides)

    months = args.months or settings.DEFAULT_HORIZON_MONTHS
    confidence = args.confidence or settings.DEFAULT_CONFIDENCE_LEVEL

    try:
        if args.demo:
            generated = DemoDataGenerator(seed=args.seed).generate_ledger(industry=args.industry)
            logger.info(f"Generated demo ledger for {generated.name} ({generated.industry})")

            if args.scenario:
                forecaster = CashFlowForecaster.from_config(settings, ledger=generated.to_ledger())
                scenario = ScenarioAssumptions(
                    scenario_id=f"demo-{args.risk_level}",
                    risk_level=RiskLevel.parse(args.risk_level)
                )
                points = forecaster.run_scenario(generated.entity_id, scenario, months, as_of=date.today())
                output = {
                    'entity_id': generated.entity_id,
                    'scenario': scenario.to_dict(),
                    'forecast': [p.to_dict() for p in points]
                }
            else:
                history = generated.monthly_net_history()
                output = _enhanced(settings, history, months, confidence, args.include_paths)
        else:
            with open(args.history) as f:
                history = json.load(f)
            output = _enhanced(settings, history, months, confidence, args.include_paths)
    except (OSError, ValueError) as e:
        # ValidationError is a ValueError
        logger.error(f"Forecast failed: {e}")
        return 1

    print(json.dumps(output, indent=2))
    return 0


def _enhanced(settings, history, months, confidence, include_paths):
    forecaster = CashFlowForecaster.from_config(settings)
    result = forecaster.generate_enhanced_forecast(history, months, confidence)
    output = result.to_dict()
    if include_paths:
        output['monte_carlo'] = result.monte_carlo.to_dict(include_paths=True)
    return output


if __name__ == '__main__':
    sys.exit(main())
