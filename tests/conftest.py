import numpy as np
import pandas as pd
import pytest

from claims_glm.data_loader import split_train_validation, transform_features

NCD_EFFECT = {0: 0.0, 10: -0.1, 20: -0.25, 30: -0.4, 40: -0.55, 50: -0.8}
AGE_EFFECT = {0: 0.4, 2: 0.3, 3: 0.1, 4: 0.0, 5: -0.1, 6: -0.1, 7: 0.2}


def make_raw_portfolio(n_rows=3000, seed=7, aliased_female=False):
    """SingaporeAuto-shaped policies with claim counts driven by NCD and age."""
    rng = np.random.default_rng(seed)
    sex = rng.choice(["F", "M", "U"], size=n_rows, p=[0.3, 0.5, 0.2])
    if aliased_female:
        female = (sex == "F").astype(int)
    else:
        female = rng.integers(0, 2, size=n_rows)
    ncd = rng.choice(list(NCD_EFFECT), size=n_rows)
    age = rng.choice(list(AGE_EFFECT), size=n_rows)
    exposure = np.round(rng.uniform(0.05, 1.0, size=n_rows), 4)

    log_rate = (np.log(0.5)
                + np.array([NCD_EFFECT[v] for v in ncd])
                + np.array([AGE_EFFECT[v] for v in age]))
    claims = rng.poisson(exposure * np.exp(log_rate))

    return pd.DataFrame({
        "SexInsured": sex,
        "Female": female,
        "VehicleType": "A",
        "PC": rng.integers(0, 2, size=n_rows),
        "Clm_Count": claims,
        "Exp_weights": exposure,
        "NCD": ncd,
        "AgeCat": age,
        "VAgeCat": rng.integers(0, 7, size=n_rows),
    })


@pytest.fixture(scope="session")
def raw_portfolio():
    return make_raw_portfolio()


@pytest.fixture(scope="session")
def portfolio(raw_portfolio):
    return transform_features(raw_portfolio)


@pytest.fixture(scope="session")
def split(portfolio):
    return split_train_validation(portfolio, 0.8, seed=11)


@pytest.fixture
def portfolio_csv(tmp_path, raw_portfolio):
    path = tmp_path / "SingaporeAuto.csv"
    raw_portfolio.to_csv(path, index=False)
    return path
