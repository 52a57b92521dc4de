from lidera.performance.models import Employee, Evaluation, PerformanceGoal


def test_unknown_fields_survive_in_extras():
    record = {"id": "e1", "name": "Ana", "status": "Férias", "customTag": "turno-b", "shirtSize": "M"}

    employee = Employee.from_record(record)

    assert employee.name == "Ana"
    assert employee.status == "Férias"
    assert employee.extras == {"customTag": "turno-b", "shirtSize": "M"}
    assert employee.to_record()["customTag"] == "turno-b"
    assert employee.to_record()["id"] == "e1"


def test_missing_fields_take_defaults():
    employee = Employee.from_record({"name": "Bruno", "status": None})

    assert employee.status == "Ativo"
    assert "id" not in employee.to_record()


def test_evaluation_reads_legacy_score_fields():
    evaluation = Evaluation.from_record({"employeeName": "Ana", "notaFinal": "8,5", "detalhes": {"Metas": "9"}})

    assert evaluation.average == 8.5
    assert evaluation.details == {"Metas": 9.0}
    assert evaluation.funcionarioMes == "Não"


def test_goal_value_is_parsed():
    assert PerformanceGoal.from_record({"goalValue": "8,7", "sectorId": "s1"}).goalValue == 8.7
