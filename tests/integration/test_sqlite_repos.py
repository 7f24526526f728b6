import sqlite3
from datetime import date
from uuid import uuid4

import pytest

from congregation.adapters.sqlite.repos import (
    SQLiteFormConfigRepo,
    SQLitePatternRepo,
    SQLiteRecordStore,
    SQLiteServiceRepo,
    SQLiteTemplateRepo,
)
from congregation.components.forms import (
    FormSubmissionPipeline,
    SubmitFormInput,
    get_template,
    load_form_config,
    load_rules,
    parse_fields,
    run_submit,
)
from congregation.components.recurrence import RecurrencePattern
from congregation.components.service_generation import (
    GenerateServicesInput,
    ServiceTemplate,
    run_generate,
)


@pytest.fixture
def services(db_path):
    return SQLiteServiceRepo(db_path)


@pytest.fixture
def store(db_path):
    return SQLiteRecordStore(db_path)


@pytest.fixture
def template(db_path):
    return SQLiteTemplateRepo(db_path).save(
        ServiceTemplate(id=uuid4(), name="Sunday Service", default_time="09:30")
    )


# --- Services ---


def test_create_and_list_services(services):
    created = services.create("2024-01-07", "Sunday Service", "09:30")

    assert created is not None
    assert services.list_by_dates(["2024-01-07", "2024-01-14"]) == [created]
    assert services.list_by_ids([created.id]) == [created]


def test_create_on_taken_date_returns_none(services):
    services.create("2024-01-07", "Sunday Service", None)

    assert services.create("2024-01-07", "Other", None) is None
    assert services.list_by_dates(["2024-01-07"])[0].name == "Sunday Service"


# --- Templates and patterns ---


def test_template_roundtrip(db_path, template):
    assert SQLiteTemplateRepo(db_path).get_by_id(template.id) == template
    assert SQLiteTemplateRepo(db_path).get_by_id(uuid4()) is None


def test_pattern_watermark_and_due(db_path, template):
    repo = SQLitePatternRepo(db_path)
    pattern = repo.save(
        RecurrencePattern(
            id=uuid4(),
            template_id=template.id,
            pattern_type="monthly",
            day_of_week=0,
            week_of_month=2,
            start_date=date(2024, 1, 1),
        )
    )
    assert pattern.id is not None
    today = date(2024, 3, 1)

    assert [p.id for p in repo.list_due(today)] == [pattern.id]

    repo.update_watermark(pattern.id, date(2024, 3, 10))

    stored = repo.get_by_id(pattern.id)
    assert stored is not None
    assert stored.last_generated_date == date(2024, 3, 10)
    assert stored.week_of_month == 2
    assert repo.list_due(today) == []


def test_inactive_pattern_is_not_due(db_path, template):
    repo = SQLitePatternRepo(db_path)
    repo.save(
        RecurrencePattern(
            id=uuid4(),
            template_id=template.id,
            pattern_type="weekly",
            day_of_week=0,
            start_date=date(2024, 1, 1),
            is_active=False,
        )
    )

    assert repo.list_due(date(2024, 3, 1)) == []


def test_generate_end_to_end(db_path, services, template):
    patterns = SQLitePatternRepo(db_path)
    pattern = patterns.save(
        RecurrencePattern(
            id=uuid4(),
            template_id=template.id,
            pattern_type="bi_weekly",
            day_of_week=0,
            start_date=date(2024, 1, 1),
        )
    )
    ports = {
        "services": services,
        "patterns": patterns,
        "templates": SQLiteTemplateRepo(db_path),
    }
    inp = GenerateServicesInput(
        template_id=template.id,
        pattern_id=pattern.id,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 2, 29),
    )

    result = run_generate(inp, **ports)

    assert [s.date for s in result.services] == [
        "2024-01-07",
        "2024-01-21",
        "2024-02-04",
        "2024-02-18",
    ]
    assert all(s.time == "09:30" for s in result.services)
    assert patterns.get_by_id(pattern.id).last_generated_date == date(2024, 2, 18)


# --- Record store ---


def test_record_store_insert_and_fetch(store):
    created = store.insert(
        "newcomers",
        {"full_name": "Jane Doe", "email": "jane@x.com", "interest_areas": ["choir", "media"]},
    )

    fetched = store.fetch_by_key("newcomers", "email", "jane@x.com")

    assert fetched is not None
    assert fetched["id"] == created["id"]
    assert fetched["interest_areas"] == ["choir", "media"]
    assert fetched["created_at"]


def test_record_store_update(store):
    created = store.insert("newcomers", {"full_name": "Jane", "phone": "111"})

    updated = store.update("newcomers", created["id"], {"phone": None, "status": "Contacted"})

    assert updated["phone"] is None
    assert updated["status"] == "Contacted"
    assert updated["full_name"] == "Jane"


def test_record_store_update_missing(store):
    with pytest.raises(LookupError):
        store.update("newcomers", str(uuid4()), {"status": "New"})


def test_record_store_rejects_unknown_names(store):
    with pytest.raises(ValueError, match="Unknown table"):
        store.fetch_by_key("users", "email", "x")
    with pytest.raises(ValueError, match="Unknown column"):
        store.insert("newcomers", {"full_name": "Jane", "nickname": "J"})


# --- Form configs ---


def test_form_config_from_template(db_path):
    repo = SQLiteFormConfigRepo(db_path)
    config_id = repo.create_from_template(
        "membership", get_template("membership"), static_content={"intro": "Join us"}
    )

    form = load_form_config("membership", repo)

    assert form is not None
    assert form.config.id == config_id
    assert form.config.status == "published"
    assert [f.field_key for f in form.fields][:2] == ["first_name", "surname"]
    assert form.static_content[0].content == "Join us"
    assert [r.rule_type for r in load_rules(config_id, repo)] == [
        "status_progression",
        "conditional_save",
    ]


def test_published_preferred_over_newer_draft(db_path):
    repo = SQLiteFormConfigRepo(db_path)
    template = get_template("welcome")
    published = repo.create_from_template("welcome", template, version=1)
    repo.create_from_template("welcome", template, version=2, status="draft")

    form = load_form_config("welcome", repo)

    assert form.config.id == published


def test_membership_submission_stores_array(db_path, store):
    repo = SQLiteFormConfigRepo(db_path)
    repo.create_from_template("membership", get_template("membership"))

    result = run_submit(
        SubmitFormInput(
            form_type="membership",
            form_data={
                "first_name": "Ade",
                "surname": "Bello",
                "email": "ade@x.com",
                "departments": ["Choir", " Ushering "],
                "join_workforce": "true",
            },
        ),
        source=repo,
        store=store,
    )

    assert result.success
    row = store.fetch_by_key("newcomers", "email", "ade@x.com")
    assert row["full_name"] == "Ade Bello"
    assert row["department_interest"] == ["Choir", "Ushering"]
    assert row["status"] == "Contacted"


def test_store_errors_propagate(store):
    # full_name is NOT NULL
    with pytest.raises(sqlite3.IntegrityError):
        store.insert("newcomers", {"email": "x@x.com"})


def test_scalar_written_to_list_column_is_stored_as_list(store):
    created = store.insert(
        "newcomers", {"full_name": "Ann", "email": "ann@x.com", "department_interest": "Choir"}
    )

    assert created["department_interest"] == ["Choir"]

    updated = store.update("newcomers", created["id"], {"interest_areas": "Media"})
    assert updated["interest_areas"] == ["Media"]
    assert store.fetch_by_key("newcomers", "email", "ann@x.com")["department_interest"] == [
        "Choir"
    ]


def test_direct_field_into_list_column_merges_again(store):
    fields = parse_fields(
        [
            {"field_key": "email", "db_column": "email"},
            {"field_key": "full_name", "db_column": "full_name"},
            {"field_key": "dept", "db_column": "department_interest"},
        ]
    )
    pipeline = FormSubmissionPipeline(store=store)

    first = pipeline.submit({"email": "a@x.com", "full_name": "Ann", "dept": "Choir"}, fields, [])
    second = pipeline.submit({"email": "a@x.com", "full_name": "Ann", "dept": "Media"}, fields, [])

    assert first.status == "created"
    assert second.status == "updated"
    assert second.record_id == first.record_id
    row = store.fetch_by_key("newcomers", "email", "a@x.com")
    assert row["department_interest"] == ["Media"]
