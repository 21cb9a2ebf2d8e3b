from typing import Optional

import numpy as np
import typer

from knnlab.core import KNNConfig, get_logger, save_json, timed
from knnlab.datasets.tabular import load_labeled_csv
from knnlab.datasets.toy import make_additive_regression, make_gaussian_classes, standardize
from knnlab.models.knn import KNNClassifier, KNNRegressor
from knnlab.neighbors import KNNError, query

app = typer.Typer(add_completion=False)


def _config(config: Optional[str], **overrides) -> KNNConfig:
    try:
        base = KNNConfig.from_yaml(config) if config else KNNConfig()
        return base.override(**overrides)
    except ValueError as e:
        raise typer.BadParameter(str(e))


@app.command()
def clf(
    csv: Optional[str] = typer.Option(None, help="Labeled CSV (label + pixel columns)"),
    label_column: str = "label",
    n_train: int = 1000,
    n_test: int = 200,
    scale: Optional[float] = typer.Option(None, help="Divide features by this (255 for pixels)"),
    standardize_x: bool = typer.Option(False, "--standardize", help="Z-score features with train-set statistics"),
    config: Optional[str] = typer.Option(None, help="YAML with k/metric/log_level"),
    k: Optional[int] = None,
    metric: Optional[str] = None,
    log_level: Optional[str] = None,
    seed: int = 0,
    report: Optional[str] = typer.Option(None, help="Write a JSON summary here"),
):
    cfg = _config(config, k=k, metric=metric, log_level=log_level, mode="classification")
    log = get_logger("knnlab", cfg.log_level, cfg.log_file)

    if csv:
        data = load_labeled_csv(csv, label_column=label_column, limit=n_train + n_test, scale=scale)
        train, test = data.split(min(n_train, len(data) - 1))
        Xtr, ytr, Xte, yte = train.X, train.y, test.X, test.y
    else:
        rng = np.random.default_rng(seed)
        X, y = make_gaussian_classes(rng, n_per_class=100, n_classes=3, d=2)
        perm = rng.permutation(len(y))
        X, y = X[perm], y[perm]
        Xtr, ytr, Xte, yte = X[:200], y[:200], X[200:], y[200:]
    if standardize_x:
        st = standardize(Xtr)
        Xtr, Xte = st.X, st.apply(Xte)
    log.info("train=%d test=%d p=%d k=%d metric=%s", len(ytr), len(yte), Xtr.shape[1], cfg.k, cfg.metric)

    try:
        with timed("knn clf predict", log):
            knn = KNNClassifier(k=cfg.k, metric=cfg.metric).fit(Xtr, ytr)
            acc = knn.accuracy(Xte, yte)
    except KNNError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"KNN clf acc={acc:.3f}")
    if report:
        save_json(report, {"config": cfg.to_dict(), "n_train": len(ytr), "n_test": len(yte), "standardize": standardize_x, "accuracy": acc})


@app.command()
def reg(
    n: int = 1000,
    noise: float = 1.0,
    config: Optional[str] = None,
    k: Optional[int] = None,
    metric: Optional[str] = None,
    log_level: Optional[str] = None,
    seed: int = 598,
):
    cfg = _config(config, k=k, metric=metric, log_level=log_level, mode="regression")
    log = get_logger("knnlab", cfg.log_level, cfg.log_file)
    data = make_additive_regression(np.random.default_rng(seed), n=n, noise=noise)
    half = n // 2
    try:
        with timed("knn reg predict", log):
            knnr = KNNRegressor(k=cfg.k, metric=cfg.metric).fit(data.X[:half], data.y[:half])
            mse = knnr.mse(data.X[half:], data.y[half:])
    except KNNError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"KNN reg mse={mse:.4f}")


@app.command()
def one(
    csv: str = typer.Argument(..., help="Labeled CSV; the row at --row is the query"),
    row: int = 0,
    label_column: str = "label",
    config: Optional[str] = None,
    k: Optional[int] = None,
    metric: Optional[str] = None,
    mode: Optional[str] = None,
    log_level: Optional[str] = None,
):
    cfg = _config(config, k=k, metric=metric, mode=mode, log_level=log_level)
    get_logger("knnlab", cfg.log_level, cfg.log_file)
    data = load_labeled_csv(csv, label_column=label_column)
    if not 0 <= row < len(data):
        raise typer.BadParameter(f"--row must be in [0, {len(data)})")
    keep = np.arange(len(data)) != row
    try:
        res = query(data.X[row], data.X[keep], data.y[keep], cfg.k, metric=cfg.metric, mode=cfg.mode)
    except KNNError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"prediction={res.prediction}  true={data.y[row]}  neighbors={len(res.neighbors)} (k={cfg.k})")
    for i in res.neighbors.by_distance():
        typer.echo(f"  idx={int(i):>6}  d={res.neighbor_distances[int(i)]:.4f}  label={res.neighbor_labels[int(i)]}")


if __name__ == "__main__":
    app()
