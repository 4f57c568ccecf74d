from school_service.validation import field_errors


def test_field_errors_flatten_pydantic_locations() -> None:
    errors = field_errors(
        [
            {"type": "less_than_equal", "loc": ("body", "latitude"), "msg": "bad", "input": 95},
            {"type": "missing", "loc": ("query", "longitude"), "msg": "Field required", "input": None},
        ]
    )

    assert errors == [
        {"type": "field", "location": "body", "path": "latitude", "msg": "bad", "value": 95},
        {"type": "field", "location": "query", "path": "longitude", "msg": "Field required"},
    ]


def test_whole_body_failure_names_each_field_once() -> None:
    errors = field_errors(
        [
            {"type": "missing", "loc": ("body",), "msg": "Field required", "input": None},
            {"type": "model_attributes_type", "loc": ("body",), "msg": "not an object", "input": "x"},
        ]
    )

    assert [error["path"] for error in errors] == ["name", "address", "latitude", "longitude"]


def test_non_finite_values_are_rendered_as_text() -> None:
    errors = field_errors([{"type": "finite_number", "loc": ("body", "latitude"), "msg": "bad", "input": float("nan")}])
    assert errors[0]["value"] == "nan"
