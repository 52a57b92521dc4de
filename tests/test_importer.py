from io import BytesIO

import pytest

from lidera.performance.importer import CsvImporter, ImportResult, guess_employee_mapping, read_csv
from lidera.store import CRITERIA, EMPLOYEES, EVALUATIONS, ROLES, SECTORS


def csv_file(text):
    return BytesIO(text.encode("utf-8"))


COLLABORATORS_CSV = """ID_Funcionario,Nome_Colaborador,Mes_Referencia,Setor,Cargo,Assiduidade_Pontualidade,Cumprimento_Tarefas,Proatividade,Organizacao_Limpeza,Uso_Uniforme_EPI,Pontuacao_Colaborador
001,Ana Souza,jan/24,Vendas,Vendedora,9,8,"8,5",9,8,"8,5"
001,Ana Souza,jan/24,Vendas,Vendedora,9,8,"8,5",9,8,"8,5"
001,Ana Souza,,Vendas,Vendedora,9,8,8,9,8,8
003,,02/2024,Produção,Operadora,10,10,10,10,12,
"""


def test_read_csv_keeps_text_cells():
    rows = read_csv(csv_file("Nome, Nota \nAna,\"8,5\"\nBruno,\n"))

    assert rows == [{"Nome": "Ana", "Nota": "8,5"}, {"Nome": "Bruno", "Nota": ""}]


def test_collaborator_history_import(store, company, employees):
    ana, _, carla = employees
    importer = CsvImporter(store, company["id"])

    result = importer.import_file("evaluations_collaborators", csv_file(COLLABORATORS_CSV))

    assert result.imported == 2
    assert result.skipped == 2
    assert result.errors == ["Linha 4: campos obrigatórios ausentes"]

    evaluations = {ev["employeeName"]: ev for ev in store.fetch_all(EVALUATIONS, company["id"])}
    imported_ana = evaluations["Ana Souza"]
    assert imported_ana["employeeId"] == ana["id"]
    assert imported_ana["date"] == "2024-01-01"
    assert imported_ana["average"] == 8.5
    assert imported_ana["type"] == "Colaborador"
    assert imported_ana["details"]["Proatividade"] == 8.5

    by_code = evaluations["Func. 003"]
    assert by_code["employeeId"] == carla["id"]
    assert by_code["date"] == "2024-02-01"
    assert by_code["details"]["Uniforme"] == 10.0
    assert by_code["average"] == 10.0


def test_reimport_skips_existing_rows(store, company, employees):
    importer = CsvImporter(store, company["id"])
    importer.import_file("evaluations_collaborators", csv_file(COLLABORATORS_CSV))

    again = importer.import_file("evaluations_collaborators", csv_file(COLLABORATORS_CSV))

    assert again.imported == 0
    assert again.skipped == 4
    assert len(store.fetch_all(EVALUATIONS, company["id"])) == 2


def test_guess_employee_mapping():
    mapping = guess_employee_mapping(["Colaborador", "E-mail", "Setor", "Função", "Admissão"])

    assert mapping == {"name": "Colaborador", "email": "E-mail", "sector": "Setor", "role": "Função"}


def test_employee_import_creates_missing_sectors_and_roles(store, company, employees):
    text = """Colaborador,E-mail,Setor,Função
Diego Alves,diego@alpha.com,Logística,Motorista
ANA SOUZA,ana@alpha.com,Vendas,Vendedora
Elisa Rocha,,logística,Motorista
,x@alpha.com,Vendas,Vendedora
"""
    result = CsvImporter(store, company["id"]).import_file("employees", csv_file(text))

    assert result.imported == 2
    assert result.skipped == 2
    assert result.created == {"setores": 1, "cargos": 1}

    sectors = store.fetch_all(SECTORS, company["id"])
    roles = store.fetch_all(ROLES, company["id"])
    assert [s["name"] for s in sectors] == ["Logística"]
    assert [r["name"] for r in roles] == ["Motorista"]

    imported = {e["name"]: e for e in store.fetch_all(EMPLOYEES, company["id"]) if e.get("source") == "csv-import"}
    assert set(imported) == {"Diego Alves", "Elisa Rocha"}
    assert imported["Diego Alves"]["sectorId"] == sectors[0]["id"]
    assert imported["Elisa Rocha"]["sectorId"] == sectors[0]["id"]
    assert imported["Diego Alves"]["status"] == "Ativo"


def test_employee_import_without_name_column(store, company):
    result = CsvImporter(store, company["id"]).import_rows("employees", [{"x": "1"}], {"name": ""})

    assert result.imported == 0
    assert result.skipped == 1


def test_long_layout_groups_metrics_per_employee_and_month(store, company, employees):
    ana = employees[0]
    text = """Nome_Colaborador,Mes_Referencia,Nome_Metrica,Setor,Cargo,Nivel,ID_Avaliacao,Nota
Felipe Costa,jan/24,Pontualidade,Expedição,Auxiliar,,,8
Felipe Costa,jan/24,Qualidade,Expedição,Auxiliar,,,6
Felipe Costa,fev/24,Pontualidade,Expedição,Auxiliar,,,9
Ana Souza,jan/24,Pontualidade,Vendas,Vendedora,,,7
,jan/24,Pontualidade,Expedição,Auxiliar,,,5
"""
    result = CsvImporter(store, company["id"]).import_file("evaluations_gomes", csv_file(text))

    assert result.imported == 3
    assert result.skipped == 1
    assert result.created == {"setores": 2, "cargos": 2, "critérios": 2, "funcionários": 1}

    criteria = store.fetch_all(CRITERIA, company["id"])
    assert sorted(c["name"] for c in criteria) == ["Pontualidade", "Qualidade"]
    assert all(c["companyIds"] == [company["id"]] for c in criteria)

    evaluations = store.fetch_all(EVALUATIONS, company["id"])
    felipe_jan = next(ev for ev in evaluations if ev["employeeName"] == "Felipe Costa" and ev["date"] == "2024-01-01")
    assert felipe_jan["details"] == {"Pontualidade": 8.0, "Qualidade": 6.0}
    assert felipe_jan["average"] == 7.0
    assert felipe_jan["type"] == "Colaborador"

    ana_jan = next(ev for ev in evaluations if ev["employeeName"] == "Ana Souza")
    assert ana_jan["employeeId"] == ana["id"]


def test_criteria_import(store, company):
    text = """Categoria_Avaliacao,ID_Avaliacao,Secao
Operadores,Uso_de_EPI,Segurança
Líderes,Gestao_Equipe,Gestão
Outros,Qualquer,
"""
    result = CsvImporter(store, company["id"]).import_file("criteria", csv_file(text))

    assert result.imported == 2
    assert result.skipped == 1
    criteria = {c["name"]: c for c in store.fetch_all(CRITERIA, company["id"])}
    assert criteria["Uso de EPI"]["type"] == "Colaborador"
    assert criteria["Gestao Equipe"]["type"] == "Líder"
    assert criteria["Uso de EPI"]["section"] == "Segurança"


def test_sector_import_skips_duplicates_in_file(store, company):
    rows = [{"Nome_Setor": "Vendas"}, {"Nome_Setor": " vendas "}, {"Nome_Setor": "RH"}]

    result = CsvImporter(store, company["id"]).import_rows("sectors", rows)

    assert result.imported == 2
    assert result.skipped == 1


def test_import_validation(store, company):
    with pytest.raises(ValueError):
        CsvImporter(store, company["id"]).import_rows("payroll", [])
    with pytest.raises(ValueError):
        CsvImporter(store).import_rows("evaluations_leaders", [])


def test_import_summary_lists_created_records():
    result = ImportResult(imported=2, skipped=1, created={"setores": 1, "cargos": 0})
    assert result.summary() == "2 registros importados (1 ignorados). Criados automaticamente: 1 setores."
