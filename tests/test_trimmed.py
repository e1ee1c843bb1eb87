import json
import pickle
from types import SimpleNamespace

import numpy as np
import pytest
import statsmodels.api as sm

from claims_glm.models import (
    build_formula,
    fit_full_model,
    fit_intercept_model,
    fit_poisson_glm,
    fit_stepwise_model,
    predict_counts,
)
from claims_glm.trimmed import TrimmedGLM, trim_model


@pytest.fixture(scope="module")
def stepwise(split):
    train, _ = split
    return fit_stepwise_model(train)


@pytest.fixture(scope="module")
def stepwise_results(stepwise):
    return stepwise.results


def test_trimmed_predictions_match_full_results(split, stepwise_results):
    train, validation = split
    trimmed = trim_model(stepwise_results, train)
    np.testing.assert_array_equal(trimmed.predict(validation),
                                  predict_counts(stepwise_results, validation))


def test_trimmed_linear_predictor_matches(split):
    train, validation = split
    full = fit_full_model(train)
    trimmed = trim_model(full, train)
    expected = np.asarray(full.predict(validation, offset=np.log(validation["Exp_weights"]),
                                       which="linear"))
    np.testing.assert_array_equal(trimmed.linear_predictor(validation), expected)


def test_design_matrix_is_c_contiguous(split):
    train, validation = split
    trimmed = trim_model(fit_full_model(train), train)
    assert trimmed.design_matrix(validation).flags["C_CONTIGUOUS"]


def test_trim_needs_only_exog_names(split, stepwise_results, monkeypatch):
    # newer statsmodels keep formula metadata under model_spec, older under design_info
    train, validation = split
    expected = predict_counts(stepwise_results, validation)
    data = stepwise_results.model.data
    for attr in ("design_info", "model_spec"):
        if attr in vars(data):
            monkeypatch.delattr(data, attr)

    trimmed = trim_model(stepwise_results, train)
    assert list(trimmed.params.index) == list(stepwise_results.model.exog_names)
    np.testing.assert_array_equal(trimmed.predict(validation), expected)


def test_trimmed_keeps_only_prediction_state(split, stepwise, stepwise_results):
    train, _ = split
    trimmed = trim_model(stepwise_results, train)
    assert trimmed.params.equals(stepwise_results.params)
    assert trimmed.formula == build_formula(trimmed.predictors)
    assert sorted(trimmed.predictors) == sorted(stepwise.terms)
    assert trimmed.response == "Clm_Count"
    assert trimmed.link == "log"
    assert trimmed.family == "Poisson"
    assert trimmed.offset_col == "Exp_weights"
    assert trimmed.levels["NCD"] == [0, 10, 20, 30, 40, 50]
    assert [level for _, level in trimmed.columns["NCD"]] == [10, 20, 30, 40, 50]
    assert len(pickle.dumps(trimmed)) < 20_000


def test_intercept_only_trim(split):
    train, validation = split
    results = fit_intercept_model(train)
    trimmed = trim_model(results, train)
    assert trimmed.predictors == []
    assert trimmed.intercept
    assert trimmed.formula == "Clm_Count ~ 1"
    np.testing.assert_allclose(
        trimmed.predict(validation),
        np.exp(results.params["Intercept"]) * validation["Exp_weights"].to_numpy(),
        rtol=1e-12,
    )


def test_numeric_term_is_rejected(split):
    train, _ = split
    data = train.assign(Density=np.linspace(0.0, 1.0, len(train)))
    results = fit_poisson_glm(data, ["NCD", "Density"])
    with pytest.raises(ValueError, match="Density"):
        trim_model(results, data)


def test_non_log_link_is_rejected(split):
    train, _ = split
    results = SimpleNamespace(model=SimpleNamespace(
        exog_names=["Intercept"],
        family=sm.families.Poisson(link=sm.families.links.Identity()),
    ))
    with pytest.raises(ValueError, match="identity"):
        trim_model(results, train)


def test_pickle_round_trip(split, stepwise_results):
    train, validation = split
    trimmed = trim_model(stepwise_results, train)
    restored = pickle.loads(pickle.dumps(trimmed))
    np.testing.assert_array_equal(restored.predict(validation), trimmed.predict(validation))


def test_dict_round_trip_through_json(split, stepwise_results):
    train, validation = split
    trimmed = trim_model(stepwise_results, train)
    restored = TrimmedGLM.from_dict(json.loads(json.dumps(trimmed.to_dict())))
    np.testing.assert_array_equal(restored.predict(validation), trimmed.predict(validation))


def test_unknown_level_is_rejected(split):
    train, validation = split
    trimmed = trim_model(fit_full_model(train), train)
    rows = validation.head(3).copy()
    rows["NCD"] = rows["NCD"].astype(int)
    rows.iloc[0, rows.columns.get_loc("NCD")] = 99
    with pytest.raises(ValueError, match="NCD"):
        trimmed.predict(rows)


def test_plain_values_accepted(split):
    train, validation = split
    trimmed = trim_model(fit_full_model(train), train)
    plain = validation.copy()
    for col in trimmed.predictors:
        plain[col] = plain[col].astype(object)
    np.testing.assert_array_equal(trimmed.predict(plain), trimmed.predict(validation))
