from lidera.performance.resolver import EmployeeResolver, current_assignment


EMPLOYEES = [
    {"id": "e1", "name": "Ana Souza", "employeeCode": "0042", "sector": "Vendas", "role": "Vendedora",
     "jobLevel": "Operacional", "status": "Férias"},
    {"id": "e2", "name": "Bruno Lima", "employeeCode": "7", "sector": "Produção", "role": "Operador"},
]


def test_matches_by_id_first():
    resolved = EmployeeResolver(EMPLOYEES).resolve({"employeeId": "e2", "employeeName": "Ana Souza"})

    assert resolved.key == "id:e2"
    assert resolved.name == "Bruno Lima"
    assert resolved.matched


def test_matches_by_code_then_by_name():
    resolver = EmployeeResolver(EMPLOYEES)

    by_code = resolver.resolve({"employeeCode": "42", "employeeName": "Outro Nome"})
    code_in_id_field = resolver.resolve({"employeeId": "007"})
    by_name = resolver.resolve({"employeeName": "  ana   SOUZA "})

    assert by_code.key == "id:e1"
    assert code_in_id_field.key == "id:e2"
    assert by_name.key == "id:e1"


def test_unmatched_evaluation_becomes_name_placeholder():
    resolver = EmployeeResolver(EMPLOYEES)

    first = resolver.resolve({"employeeName": "Carla Dias"})
    second = resolver.resolve({"employeeName": "CARLA  dias"})
    typo = resolver.resolve({"employeeName": "Carla Diaz"})

    assert first.key == second.key == "name:carla dias"
    assert typo.key != first.key
    assert not first.matched
    assert first.employee_id is None
    assert first.status == "Ativo"


def test_resolving_twice_gives_the_same_key():
    resolver = EmployeeResolver(EMPLOYEES)
    evaluations = [
        {"employeeId": "e1"},
        {"employeeCode": "0007"},
        {"employeeName": "Carla Dias"},
        {},
    ]

    first = [resolver.resolve(ev).key for ev in evaluations]
    second = [EmployeeResolver(EMPLOYEES).resolve(ev).key for ev in evaluations]

    assert first == second == [resolver.resolve(ev).key for ev in evaluations]
    assert first == ["id:e1", "id:e2", "name:carla dias", "name:colaborador desconhecido"]


def test_placeholder_without_name_uses_unknown_label():
    resolved = EmployeeResolver([]).resolve({})

    assert resolved.name == "Colaborador Desconhecido"
    assert resolved.key == "name:colaborador desconhecido"


def test_status_comes_from_employee_record():
    resolved = EmployeeResolver(EMPLOYEES).resolve({"employeeId": "e1"})
    assert resolved.status == "Férias"


def test_current_assignment_prefers_employee_record():
    resolver = EmployeeResolver(EMPLOYEES)
    evaluation = {"employeeId": "e1", "sector": "Antigo", "role": "Estagiária", "type": "Colaborador"}

    assert current_assignment(resolver.resolve(evaluation), evaluation) == {
        "sector": "Vendas",
        "role": "Vendedora",
        "level": "Operacional",
    }

    orphan = {"employeeName": "Zé", "sector": "Logística", "type": "Líder"}
    assert current_assignment(resolver.resolve(orphan), orphan) == {
        "sector": "Logística",
        "role": "Não definido",
        "level": "Líder",
    }
