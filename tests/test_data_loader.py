from urllib.error import URLError

import numpy as np
import pandas as pd
import pytest

from claims_glm import config, data_loader
from claims_glm.data_loader import fetch_dataset, load_data, split_train_validation, transform_features
from claims_glm.errors import DataValidationError, DatasetUnavailableError


def test_load_data_reads_csv(portfolio_csv, raw_portfolio):
    df = load_data(portfolio_csv)
    assert len(df) == len(raw_portfolio)
    assert set(config.REQUIRED_COLS) <= set(df.columns)


def test_load_data_missing_file_without_download(tmp_path):
    with pytest.raises(DatasetUnavailableError, match="not found"):
        load_data(tmp_path / "nope.csv", download=False)


def test_load_data_downloads_and_caches_missing_file(tmp_path, monkeypatch, raw_portfolio):
    urls = []

    def fake_read(url):
        urls.append(url)
        return raw_portfolio

    monkeypatch.setattr(data_loader, "_read_remote_csv", fake_read)
    path = tmp_path / "data" / "SingaporeAuto.csv"

    df = load_data(path)
    assert urls == [config.DATA_URL]
    assert path.is_file()
    assert len(df) == len(raw_portfolio)

    # second load reads the cached copy
    load_data(path)
    assert len(urls) == 1


def test_failed_download_raises_dataset_unavailable(tmp_path, monkeypatch):
    def offline(url):
        raise URLError("Name or service not known")

    monkeypatch.setattr(data_loader, "_read_remote_csv", offline)
    path = tmp_path / "SingaporeAuto.csv"
    with pytest.raises(DatasetUnavailableError, match="download"):
        load_data(path)
    assert not path.exists()


def test_fetch_dataset_uses_given_url(tmp_path, monkeypatch, raw_portfolio):
    monkeypatch.setattr(data_loader, "_read_remote_csv", lambda url: raw_portfolio.head(5))
    path = fetch_dataset(tmp_path / "cache" / "auto.csv", url="https://example.org/auto.csv")
    assert len(pd.read_csv(path)) == 5


def test_load_data_missing_columns(tmp_path, raw_portfolio):
    path = tmp_path / "partial.csv"
    raw_portfolio.drop(columns=["NCD"]).to_csv(path, index=False)
    with pytest.raises(DatasetUnavailableError, match="NCD"):
        load_data(path)


def test_transform_casts_factors_to_unordered_categories(portfolio):
    for col in config.FACTOR_COLS:
        assert isinstance(portfolio[col].dtype, pd.CategoricalDtype)
        assert not portfolio[col].cat.ordered
    assert list(portfolio["NCD"].cat.categories) == [0, 10, 20, 30, 40, 50]


def test_transform_derives_frequency(portfolio, raw_portfolio):
    expected = raw_portfolio["Clm_Count"] / raw_portfolio["Exp_weights"]
    np.testing.assert_allclose(portfolio["Freq"], expected)
    assert "VehicleType" not in portfolio.columns


def test_transform_leaves_source_untouched(raw_portfolio):
    before = raw_portfolio.copy()
    transform_features(raw_portfolio)
    pd.testing.assert_frame_equal(raw_portfolio, before)


def test_transform_rejects_non_positive_exposure(raw_portfolio):
    bad = raw_portfolio.copy()
    bad.loc[bad.index[:3], "Exp_weights"] = 0.0
    with pytest.raises(DataValidationError, match="3 records"):
        transform_features(bad)


def test_transform_rejects_missing_claim_counts(tmp_path, raw_portfolio):
    bad = raw_portfolio.copy()
    bad["Clm_Count"] = bad["Clm_Count"].astype(object)
    bad.loc[bad.index[:2], "Clm_Count"] = "n/a"
    path = tmp_path / "bad_counts.csv"
    bad.to_csv(path, index=False)

    loaded = load_data(path)
    assert loaded["Clm_Count"].isna().sum() == 2
    with pytest.raises(DataValidationError, match="2 records.*Clm_Count"):
        transform_features(loaded)


def test_transform_rejects_negative_claim_counts(raw_portfolio):
    bad = raw_portfolio.copy()
    bad.loc[bad.index[0], "Clm_Count"] = -1
    with pytest.raises(DataValidationError, match="1 records"):
        transform_features(bad)


def test_split_sizes_100_rows(portfolio):
    df = portfolio.iloc[:100]
    train, validation = split_train_validation(df, 0.8, seed=1)
    assert len(train) == 80
    assert len(validation) == 20


def test_split_is_a_partition(portfolio):
    train, validation = split_train_validation(portfolio, 0.8, seed=3)
    assert train.index.intersection(validation.index).empty
    assert train.index.union(validation.index).sort_values().equals(portfolio.index.sort_values())
    assert len(train) == int(np.floor(len(portfolio) * 0.8))


def test_split_is_reproducible(portfolio):
    first, _ = split_train_validation(portfolio, 0.7, seed=42)
    second, _ = split_train_validation(portfolio, 0.7, seed=42)
    other, _ = split_train_validation(portfolio, 0.7, seed=43)
    assert first.index.equals(second.index)
    assert not first.index.equals(other.index)


@pytest.mark.parametrize("fraction", [0.0, 1.0, -0.2, 1.5])
def test_split_rejects_bad_fraction(portfolio, fraction):
    with pytest.raises(ValueError):
        split_train_validation(portfolio, fraction, seed=1)
