from core.filters import (
    FilterState,
    apply_filters,
    describe_filters,
    filter_options,
    id_to_number,
    month_key,
    sort_by_id_desc,
    to_iso_date,
)

RECORDS = [
    {"id": "1", "nombre": "Ana", "estado": "PENDIENTE", "fechaEvento": "2024-03-10", "lugar": "Salón A",
     "vendedorComercialAsignado": "Lucía"},
    {"id": "20", "nombre": "Bruno", "estado": "APROBADO", "fechaEvento": "15/04/2024", "lugar": "Salón B",
     "vendedorComercialAsignado": "Martín"},
    {"id": "3", "nombre": "Carla", "estado": "PENDIENTE", "fechaEvento": "", "lugar": "Salón A",
     "observacionesList": [{"texto": "Quiere menú vegano", "fecha": ""}]},
    {"id": "abc", "nombre": "Dario", "estado": "RECHAZADO", "fechaEvento": "2024-04-01", "lugar": "Quinta"},
]


def _ids(rows):
    return [r["id"] for r in rows]


def test_date_parsing():
    assert to_iso_date("2024-03-10") == "2024-03-10"
    assert to_iso_date("5/4/2024") == "2024-04-05"
    assert to_iso_date("mañana") == ""
    assert to_iso_date(None) == ""
    assert month_key("15/04/2024") == "2024-04"


def test_id_to_number():
    assert id_to_number("20") == 20
    assert id_to_number("abc") == float("-inf")
    assert id_to_number("") == float("-inf")
    assert id_to_number("nan") == float("-inf")


def test_sort_newest_first_non_numeric_last():
    rows = [{"id": i} for i in ["3", "1", "20", "abc"]]
    assert _ids(sort_by_id_desc(rows)) == ["20", "3", "1", "abc"]


def test_no_filters_returns_everything_sorted():
    assert _ids(apply_filters(RECORDS, FilterState())) == ["20", "3", "1", "abc"]


def test_date_range_excludes_unparseable_dates():
    state = FilterState(fecha_desde="2024-04-01", fecha_hasta="2024-04-30")
    assert _ids(apply_filters(RECORDS, state)) == ["20", "abc"]


def test_predicates_are_conjunctive():
    state = FilterState(estado="PENDIENTE", local="Salón A")
    assert _ids(apply_filters(RECORDS, state)) == ["3", "1"]
    state = FilterState(estado="PENDIENTE", comercial="Lucía")
    assert _ids(apply_filters(RECORDS, state)) == ["1"]


def test_month_filter():
    assert _ids(apply_filters(RECORDS, FilterState(mes="2024-04"))) == ["20", "abc"]


def test_search_is_case_insensitive_and_recursive():
    assert _ids(apply_filters(RECORDS, FilterState(busqueda="BRUNO"))) == ["20"]
    assert _ids(apply_filters(RECORDS, FilterState(busqueda="vegano"))) == ["3"]


def test_filtered_result_is_subset():
    state = FilterState(estado="PENDIENTE")
    out = apply_filters(RECORDS, state)
    assert all(r in RECORDS for r in out)
    assert len(out) <= len(RECORDS)


def test_options_come_from_full_collection():
    opts = filter_options(RECORDS)
    assert opts.estados == ["APROBADO", "PENDIENTE", "RECHAZADO"]
    assert opts.comerciales == ["Lucía", "Martín"]
    assert opts.meses == ["2024-04", "2024-03"]
    assert opts.locales == ["Quinta", "Salón A", "Salón B"]


def test_describe_filters():
    state = FilterState(estado="APROBADO", busqueda="ana")
    text = describe_filters(state, 1, 4)
    assert text.startswith("Mostrando 1 de 4 clientes")
    assert "Estado: APROBADO" in text
    assert 'Búsqueda: "ana"' in text
    assert not FilterState().is_active
    assert state.is_active


def test_dmy_date_inside_range_and_text_date_outside():
    rows = [{"id": "1", "fechaEvento": "15/03/2025"}, {"id": "2", "fechaEvento": "March"}]
    state = FilterState(fecha_desde="2025-03-01", fecha_hasta="2025-03-31")
    assert _ids(apply_filters(rows, state)) == ["1"]
    assert _ids(apply_filters(rows, FilterState(fecha_hasta="2030-01-01"))) == ["1"]


def test_search_matches_any_field():
    rows = [{"id": "1", "nombre": "Luis", "mail": "ana@x.com"}, {"id": "2", "nombre": "Pedro"}]
    assert _ids(apply_filters(rows, FilterState(busqueda="ana"))) == ["1"]
