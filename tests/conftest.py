import os

import pytest

# Set env before importing lidera (the config singleton reads it at import)
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["ENABLE_PHOTO_UPLOAD"] = "false"

from lidera.db import create_store_engine, init_schema
from lidera.performance.queries import EvaluationQueries
from lidera.store import DocumentStore, COMPANIES, EMPLOYEES, EVALUATIONS


@pytest.fixture(scope="function")
def store():
    """Fresh in-memory document store per test."""
    engine = create_store_engine("sqlite:///:memory:")
    init_schema(engine)
    yield DocumentStore(engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def clear_query_cache():
    """The query cache is process-wide; start every test empty."""
    EvaluationQueries.invalidate()
    yield
    EvaluationQueries.invalidate()


@pytest.fixture
def company(store):
    company_id = store.create(COMPANIES, {"name": "Alpha Ltda"})
    return {"id": company_id, "name": "Alpha Ltda"}


@pytest.fixture
def other_company(store):
    company_id = store.create(COMPANIES, {"name": "Beta SA"})
    return {"id": company_id, "name": "Beta SA"}


@pytest.fixture
def employees(store, company):
    """Three registered employees across two sectors."""
    data = [
        {"name": "Ana Souza", "employeeCode": "001", "sector": "Vendas", "role": "Vendedora",
         "jobLevel": "Operacional", "status": "Ativo"},
        {"name": "Bruno Lima", "employeeCode": "002", "sector": "Vendas", "role": "Gerente",
         "jobLevel": "Tático", "status": "Férias"},
        {"name": "Carla Dias", "employeeCode": "003", "sector": "Produção", "role": "Operadora",
         "jobLevel": "Operacional", "status": "Afastado"},
    ]
    records = []
    for item in data:
        employee_id = store.create(EMPLOYEES, item, company["id"])
        records.append({**item, "id": employee_id, "companyId": company["id"]})
    return records


def make_evaluation(employee, date, average, details=None, highlight=False, **extra):
    """Evaluation record as stored by the form."""
    record = {
        "employeeId": employee.get("id"),
        "employeeName": employee["name"],
        "sector": employee.get("sector", ""),
        "role": employee.get("role", ""),
        "type": employee.get("jobLevel", "Operacional"),
        "date": date,
        "average": average,
        "details": details or {},
        "funcionarioMes": "Sim" if highlight else "Não",
    }
    record.update(extra)
    return record


@pytest.fixture
def seeded_evaluations(store, company, employees):
    """Ana evaluated in three months, Bruno twice, Carla once."""
    ana, bruno, carla = employees
    items = [
        make_evaluation(ana, "2024-01-01", 9.0, {"Comunicação": 9.0, "Metas": 9.0}),
        make_evaluation(ana, "2024-02-01", 7.0, {"Comunicação": 6.0, "Metas": 8.0}),
        make_evaluation(ana, "2024-03-01", 8.0, {"Comunicação": 8.0, "Metas": 8.0}, highlight=True),
        make_evaluation(bruno, "2024-01-01", 6.0, {"Comunicação": 6.0, "Metas": 6.0}),
        make_evaluation(bruno, "2024-03-01", 7.0, {"Comunicação": 7.0, "Metas": 7.0}),
        make_evaluation(carla, "2024-02-01", 10.0, {"Comunicação": 10.0, "Metas": 10.0}),
    ]
    records = []
    for item in items:
        evaluation_id = store.create(EVALUATIONS, item, company["id"])
        records.append({**item, "id": evaluation_id, "companyId": company["id"]})
    return records
