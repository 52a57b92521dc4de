from lidera.performance.queries import EvaluationQueries
from lidera.store import COMPANIES, EMPLOYEES, ROLES, SECTORS


def test_reads_are_cached_until_invalidated(store, company, employees):
    queries = EvaluationQueries(store, company["id"])
    assert len(queries.get_employees()) == 3

    store.create(EMPLOYEES, {"name": "Diego"}, company["id"])
    assert len(queries.get_employees()) == 3

    EvaluationQueries.invalidate(company["id"], EMPLOYEES)
    assert len(queries.get_employees()) == 4


def test_invalidate_without_arguments_reloads_everything(store, company, employees):
    queries = EvaluationQueries(store, company["id"])
    queries.get_employees()
    queries.get_companies()

    store.create(EMPLOYEES, {"name": "Diego"}, company["id"])
    store.create(COMPANIES, {"name": "Gama ME"})
    EvaluationQueries.invalidate()

    assert EvaluationQueries.cached_keys() == []
    assert len(queries.get_employees()) == 4
    assert len(queries.get_companies()) == 2


def test_invalidate_collection_across_tenants(store, company, other_company):
    EvaluationQueries(store, company["id"]).get_employees()
    EvaluationQueries(store, company["id"]).get_sectors()
    EvaluationQueries(store, other_company["id"]).get_employees()

    EvaluationQueries.invalidate(collection=EMPLOYEES)

    assert EvaluationQueries.cached_keys() == [(company["id"], SECTORS)]


def test_invalidate_drops_only_one_tenant(store, company, other_company):
    EvaluationQueries(store, company["id"]).get_employees()
    EvaluationQueries(store, other_company["id"]).get_employees()
    EvaluationQueries(store, company["id"]).get_companies()

    EvaluationQueries.invalidate(company["id"])

    keys = EvaluationQueries.cached_keys()
    assert (company["id"], EMPLOYEES) not in keys
    assert (other_company["id"], EMPLOYEES) in keys
    assert (None, COMPANIES) in keys


def test_companies_are_cached_globally(store, company, other_company):
    names = [c["name"] for c in EvaluationQueries(store, company["id"]).get_companies()]

    assert names == ["Alpha Ltda", "Beta SA"]
    assert EvaluationQueries.cached_keys() == [(None, COMPANIES)]
    store.create(COMPANIES, {"name": "Gama ME"})
    shared = EvaluationQueries(store, other_company["id"]).get_collection(COMPANIES)
    assert [c["name"] for c in shared] == names


def test_lookup_maps(store, company, other_company):
    sector_id = store.create(SECTORS, {"name": "Vendas"}, company["id"])
    role_id = store.create(ROLES, {"name": "Caixa"}, company["id"])
    store.create(SECTORS, {"name": "Outro"}, other_company["id"])

    maps = EvaluationQueries(store, company["id"]).get_lookup_maps()

    assert maps == {"sectors": {sector_id: "Vendas"}, "roles": {role_id: "Caixa"}}


def test_evaluations_page_newest_first(store, company, seeded_evaluations):
    page = EvaluationQueries(store, company["id"]).get_evaluations_page(None, 4)

    assert [ev["id"] for ev in page.items] == [ev["id"] for ev in reversed(seeded_evaluations)][:4]
    assert page.has_more
