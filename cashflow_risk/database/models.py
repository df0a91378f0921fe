"""
Database Models for Cash Flow Risk Engine

SQLAlchemy models for ledger transactions, open invoices, market
indicators and stored scenario forecasts.
"""

import uuid
from datetime import datetime
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import JSON

db = SQLAlchemy()


def generate_uuid():
    return str(uuid.uuid4())


class Transaction(db.Model):
    """
    Ledger transaction.

    Read-only to the forecasting engine; written by the ledger import.
    """
    __tablename__ = 'transactions'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    entity_id = db.Column(db.String(36), nullable=False, index=True)

    date = db.Column(db.Date, nullable=False, index=True)
    amount = db.Column(db.Float, nullable=False)
    kind = db.Column(db.String(20), nullable=False)  # income, expense
    description = db.Column(db.String(500))
    counterparty = db.Column(db.String(200))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'entity_id': self.entity_id,
            'date': self.date.isoformat() if self.date else None,
            'amount': self.amount,
            'kind': self.kind,
            'description': self.description,
            'counterparty': self.counterparty
        }


class Invoice(db.Model):
    """
    Customer invoice.

    Approved or processing invoices without a payment date are the
    pending receivables a forecast expects to collect.
    """
    __tablename__ = 'invoices'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    entity_id = db.Column(db.String(36), nullable=False, index=True)

    invoice_date = db.Column(db.Date)
    due_date = db.Column(db.Date)
    total_amount = db.Column(db.Float, nullable=False)
    status = db.Column(db.String(20), default='DRAFT')  # DRAFT, APPROVED, PROCESSING, PAID
    paid_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'entity_id': self.entity_id,
            'invoice_date': self.invoice_date.isoformat() if self.invoice_date else None,
            'due_date': self.due_date.isoformat() if self.due_date else None,
            'total_amount': self.total_amount,
            'status': self.status,
            'paid_at': self.paid_at.isoformat() if self.paid_at else None
        }


class MarketIndicator(db.Model):
    """Macro-economic snapshot, one row per observation date"""
    __tablename__ = 'market_indicators'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    observed_on = db.Column(db.Date, nullable=False, unique=True)

    interest_rate = db.Column(db.Float, nullable=False)
    inflation_rate = db.Column(db.Float, nullable=False)
    gdp_growth = db.Column(db.Float, nullable=False)
    unemployment_rate = db.Column(db.Float, nullable=False)
    equity_index = db.Column(db.Float)
    fx_rate = db.Column(db.Float)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class CashFlowForecast(db.Model):
    """
    Stored scenario forecast, one row per forecast month.

    Rows for a scenario are replaced wholesale on every run.
    """
    __tablename__ = 'cash_flow_forecasts'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    scenario_id = db.Column(db.String(100), nullable=False, index=True)

    period_index = db.Column(db.Integer, nullable=False)
    month = db.Column(db.Date, nullable=False)
    income = db.Column(db.Float)
    expenses = db.Column(db.Float)
    net = db.Column(db.Float)
    conservative = db.Column(db.Float)
    optimistic = db.Column(db.Float)
    confidence = db.Column(db.Float)

    # Factors, risks and bands (JSON)
    forecast_data = db.Column(JSON)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'scenario_id': self.scenario_id,
            'period_index': self.period_index,
            'month': self.month.isoformat() if self.month else None,
            'income': self.income,
            'expenses': self.expenses,
            'net': self.net,
            'conservative': self.conservative,
            'optimistic': self.optimistic,
            'confidence': self.confidence,
            'forecast_data': self.forecast_data,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
