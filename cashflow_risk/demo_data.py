"""
Demo Data Generator for the Cash Flow Risk Engine

Generates a realistic SMB ledger for demonstrations and testing:
weekly customer collections shaped by industry seasonality, payroll,
fixed rent, supplier and marketing payments, and a handful of open
invoices.
"""

import random
import uuid
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Optional, Any
from dataclasses import dataclass

from .data.aggregator import add_months
from .data.providers import InMemoryLedger
from .data.validation import parse_invoices, parse_transactions

# Industry configurations with realistic monthly revenue profiles
INDUSTRY_PROFILES = {
    "professional_services": {
        "name": "Professional Services",
        "revenue_range": (50000, 200000),
        "gross_margin": (0.60, 0.75),
        "payroll_ratio": (0.40, 0.55),
        "dso_range": (35, 60),
        "growth_rate": (0.02, 0.08),
        "seasonality": [1.0, 0.95, 1.05, 1.10, 1.05, 0.95, 0.85, 0.90, 1.05, 1.15, 1.10, 0.85],
        "example_companies": ["Apex Consulting Group", "Summit Accounting Solutions"]
    },
    "manufacturing": {
        "name": "Manufacturing",
        "revenue_range": (100000, 500000),
        "gross_margin": (0.25, 0.40),
        "payroll_ratio": (0.20, 0.30),
        "dso_range": (40, 65),
        "growth_rate": (0.01, 0.05),
        "seasonality": [0.90, 0.85, 0.95, 1.05, 1.10, 1.15, 1.05, 1.00, 1.05, 1.10, 1.00, 0.80],
        "example_companies": ["Precision Parts Inc", "Midwest Tool & Die"]
    },
    "retail": {
        "name": "Retail",
        "revenue_range": (75000, 300000),
        "gross_margin": (0.35, 0.50),
        "payroll_ratio": (0.15, 0.25),
        "dso_range": (5, 15),
        "growth_rate": (0.00, 0.06),
        "seasonality": [0.70, 0.75, 0.85, 0.90, 0.95, 0.90, 0.85, 0.90, 0.95, 1.05, 1.35, 1.85],
        "example_companies": ["Urban Home Furnishings", "Outdoor Adventure Gear"]
    },
    "technology": {
        "name": "Technology",
        "revenue_range": (40000, 150000),
        "gross_margin": (0.70, 0.85),
        "payroll_ratio": (0.45, 0.60),
        "dso_range": (25, 45),
        "growth_rate": (0.05, 0.15),
        "seasonality": [0.95, 0.90, 1.00, 1.05, 1.00, 0.95, 0.90, 0.95, 1.05, 1.10, 1.10, 1.05],
        "example_companies": ["CloudSync Solutions", "DataPulse Analytics"]
    },
    "construction": {
        "name": "Construction",
        "revenue_range": (150000, 600000),
        "gross_margin": (0.20, 0.35),
        "payroll_ratio": (0.25, 0.40),
        "dso_range": (50, 80),
        "growth_rate": (0.02, 0.07),
        "seasonality": [0.60, 0.65, 0.85, 1.10, 1.25, 1.30, 1.25, 1.20, 1.10, 0.95, 0.75, 0.55],
        "example_companies": ["Cornerstone Builders", "Metro Electrical Services"]
    }
}


@dataclass
class GeneratedLedger:
    """Generated ledger for one demo entity"""
    entity_id: str
    name: str
    industry: str
    transactions: List[Dict[str, Any]]
    invoices: List[Dict[str, Any]]

    def to_ledger(self) -> InMemoryLedger:
        return InMemoryLedger(
            transactions={self.entity_id: parse_transactions(self.transactions)},
            invoices={self.entity_id: parse_invoices(self.invoices)}
        )

    def monthly_net_history(self) -> List[Dict[str, Any]]:
        """Net cash flow per month as {date, amount} records"""
        totals = defaultdict(float)
        for t in self.transactions:
            month = date.fromisoformat(t["date"]).replace(day=1)
            sign = 1 if t["kind"] == "income" else -1
            totals[month] += sign * t["amount"]

        return [
            {"date": month.isoformat(), "amount": round(totals[month], 2)}
            for month in sorted(totals)
        ]


class DemoDataGenerator:
    """
    Generate realistic demo ledgers.

    Example:
        generator = DemoDataGenerator(seed=42)
        ledger = generator.generate_ledger(industry="retail")
        history = ledger.monthly_net_history()
    """

    def __init__(self, seed: Optional[int] = None):
        """Initialize generator with optional random seed for reproducibility"""
        self._random = random.Random(seed)

    def generate_ledger(
        self,
        industry: str = "professional_services",
        months_of_history: int = 24,
        as_of: Optional[date] = None,
        entity_id: Optional[str] = None
    ) -> GeneratedLedger:
        """
        Generate a ledger covering the full months before as_of.

        Args:
            industry: Industry type (see INDUSTRY_PROFILES)
            months_of_history: Number of months of data to generate
            as_of: End of the history window (today by default)
            entity_id: Optional fixed entity id

        Returns:
            GeneratedLedger with transactions and open invoices
        """
        rnd = self._random
        profile = INDUSTRY_PROFILES.get(industry, INDUSTRY_PROFILES["professional_services"])
        as_of = as_of or date.today()
        entity_id = entity_id or str(uuid.UUID(int=rnd.getrandbits(128)))

        base_revenue = rnd.uniform(*profile["revenue_range"])
        gross_margin = rnd.uniform(*profile["gross_margin"])
        payroll = round(base_revenue * rnd.uniform(*profile["payroll_ratio"]), 2)
        monthly_growth = rnd.uniform(*profile["growth_rate"]) / 12
        rent = round(base_revenue * 0.08, 2)  # Fixed rent

        start = add_months(as_of.replace(day=1), -months_of_history)
        transactions = []

        for month_offset in range(months_of_history):
            period_date = add_months(start, month_offset)

            # Apply seasonality and growth
            seasonality = profile["seasonality"][period_date.month - 1]
            growth_factor = 1 + (monthly_growth * month_offset)
            revenue = base_revenue * seasonality * growth_factor * rnd.uniform(0.92, 1.08)
            cogs = revenue * (1 - gross_margin)
            marketing = revenue * rnd.uniform(0.03, 0.08)

            transactions.extend(
                self._generate_month(period_date, revenue, payroll, rent, cogs, marketing)
            )

        return GeneratedLedger(
            entity_id=entity_id,
            name=rnd.choice(profile["example_companies"]),
            industry=industry,
            transactions=transactions,
            invoices=self._generate_invoices(as_of, base_revenue, profile)
        )

    def _generate_month(
        self,
        period_date: date,
        revenue: float,
        payroll: float,
        rent: float,
        cogs: float,
        marketing: float
    ) -> List[Dict]:
        """Ledger entries for one month"""
        rnd = self._random
        entries = []

        # Revenue collections (split across month)
        for week in range(4):
            entries.append({
                "date": (period_date + timedelta(days=7 * week + rnd.randint(0, 3))).isoformat(),
                "kind": "income",
                "description": f"Customer collections - Week {week + 1}",
                "amount": round(revenue * rnd.uniform(0.20, 0.30), 2)
            })

        # Payroll (twice a month)
        for pay_period in range(2):
            entries.append({
                "date": (period_date + timedelta(days=14 * pay_period + 13)).isoformat(),
                "kind": "expense",
                "description": f"Payroll - Period {pay_period + 1}",
                "amount": round(payroll / 2, 2)
            })

        entries.append({
            "date": period_date.isoformat(),
            "kind": "expense",
            "description": "Monthly rent payment",
            "counterparty": "Landlord",
            "amount": rent
        })

        entries.append({
            "date": (period_date + timedelta(days=14)).isoformat(),
            "kind": "expense",
            "description": "Supplier payments",
            "amount": round(cogs * 0.7, 2)
        })

        entries.append({
            "date": (period_date + timedelta(days=9)).isoformat(),
            "kind": "expense",
            "description": "Marketing and advertising",
            "amount": round(marketing, 2)
        })

        return entries

    def _generate_invoices(self, as_of: date, base_revenue: float, profile: Dict) -> List[Dict]:
        """Open receivables due within the customer payment terms"""
        rnd = self._random
        invoices = []

        for i in range(rnd.randint(2, 5)):
            invoices.append({
                "id": f"INV-{as_of.year}-{i + 1:04d}",
                "total_amount": round(base_revenue * rnd.uniform(0.05, 0.20), 2),
                "due_date": (as_of + timedelta(days=int(rnd.uniform(*profile["dso_range"])))).isoformat(),
                "status": "APPROVED"
            })

        return invoices


def load_demo_data_to_db(db_session, industry: str = "professional_services",
                         months_of_history: int = 24, seed: int = 42) -> str:
    """
    Load a demo ledger directly into the database.

    Args:
        db_session: SQLAlchemy database session
        industry: Industry profile to generate
        months_of_history: Months of transactions to create
        seed: Random seed (reproducible demos)

    Returns:
        The created entity ID
    """
    from .database.models import Invoice, Transaction

    generated = DemoDataGenerator(seed=seed).generate_ledger(
        industry=industry, months_of_history=months_of_history
    )

    for entry in generated.transactions:
        db_session.add(Transaction(
            entity_id=generated.entity_id,
            date=date.fromisoformat(entry["date"]),
            amount=entry["amount"],
            kind=entry["kind"],
            description=entry["description"],
            counterparty=entry.get("counterparty")
        ))

    for invoice in generated.invoices:
        db_session.add(Invoice(
            entity_id=generated.entity_id,
            total_amount=invoice["total_amount"],
            due_date=date.fromisoformat(invoice["due_date"]),
            status=invoice["status"]
        ))

    db_session.commit()
    return generated.entity_id
