# visualization.py
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from pathlib import Path

from .model_selection import within_one_std_err

LOG_SCALE_PARAMS = {"penalty"}


def plot_label_distribution(data: pd.DataFrame, save_dir: Path, label_col: str = "stars"):
    """Bar chart of the star-rating distribution."""
    save_dir = Path(save_dir)
    save_dir.mkdir(parents=True, exist_ok=True)
    plt.figure(figsize=(6, 4))
    sns.countplot(data=data, x=label_col, color="steelblue")
    plt.xlabel("Stars")
    plt.ylabel("Reviews")
    plt.title("Star rating distribution")
    plt.tight_layout()
    out = save_dir / "star_distribution.png"
    plt.savefig(out, dpi=200)
    plt.close()
    return out


def plot_tuning_results(tuning_results: dict, save_dir: Path, metrics=("accuracy", "roc_auc")):
    """Mean +/- standard error of every metric against the tuned parameter(s), one figure per model."""
    save_dir = Path(save_dir)
    save_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for model_name, result in tuning_results.items():
        tuned = result.tuned_params or list(result.param_grid)[:1]
        x_param = tuned[0]
        hue_param = tuned[1] if len(tuned) > 1 else None

        fig, axes = plt.subplots(1, len(metrics), figsize=(6 * len(metrics), 4.5))
        axes = np.atleast_1d(axes)
        for ax, metric in zip(axes, metrics):
            summary = result.summary(metric).sort_values(x_param)
            groups = summary.groupby(hue_param, sort=True) if hue_param else [(None, summary)]
            for level, g in groups:
                label = f"{hue_param}={level}" if hue_param else None
                ax.errorbar(
                    g[x_param], g["mean"], yerr=g["std_err"].fillna(0.0),
                    marker="o", capsize=4, label=label,
                )
            if metric == "roc_auc":
                eligible = summary[within_one_std_err(summary)]
                ax.scatter(eligible[x_param], eligible["mean"], s=120, facecolors="none",
                           edgecolors="red", label="within 1 SE of best")
            if x_param in LOG_SCALE_PARAMS:
                ax.set_xscale("log")
            ax.set_xlabel(x_param)
            ax.set_ylabel(f"{metric} (mean +/- SE over folds)")
            ax.grid(True, alpha=0.3)
            ax.legend(fontsize=8)
        fig.suptitle(f"{model_name}: cross-validated tuning results")
        plt.tight_layout()
        out = save_dir / f"tuning_{_slug(model_name)}.png"
        plt.savefig(out, dpi=200)
        plt.close(fig)
        paths.append(out)
    return paths


def plot_confusion_matrices(test_results: dict, save_dir: Path):
    """Plot test-set confusion matrices for all models"""
    n_models = len(test_results)
    if n_models == 0:
        return None

    fig, axes = plt.subplots(1, n_models, figsize=(5 * n_models, 4.5))
    axes = np.atleast_1d(axes)

    for ax, (model_name, res) in zip(axes, test_results.items()):
        cm = res["confusion_matrix"]
        sns.heatmap(
            cm.astype(int),
            annot=True,
            fmt="d",
            cmap="Blues",
            ax=ax,
            cbar=True,
            square=True,
        )
        ax.set_title(f"{model_name}\nConfusion Matrix")
        ax.set_xlabel("Predicted")
        ax.set_ylabel("Actual")

    plt.tight_layout()
    out = Path(save_dir) / "confusion_matrices.png"
    plt.savefig(out, dpi=200, bbox_inches="tight")
    plt.close(fig)
    print(f"✓ Confusion matrices saved to {out}")
    return out


def export_summary_table(test_results: dict, save_dir: Path) -> pd.DataFrame:
    rows = []
    for model, res in test_results.items():
        tm = res.get("test_metrics", {})
        rows.append(
            {
                "Model": model,
                "Accuracy": tm.get("accuracy"),
                "ROC_AUC": tm.get("roc_auc"),
                "Params": str(res.get("best_params")),
            }
        )
    df = pd.DataFrame(rows)
    df.to_csv(Path(save_dir) / "model_summary.csv", index=False)
    (Path(save_dir) / "model_summary.md").write_text(
        df.to_markdown(index=False, floatfmt=".4f"), encoding="utf-8"
    )
    return df


def export_top_features(test_results: dict, save_dir: Path) -> pd.DataFrame:
    frames = []
    for model, res in test_results.items():
        top = res.get("top_features")
        if top is None or len(top) == 0:
            continue
        frames.append(top.assign(Model=model)[["Model"] + list(top.columns)])
    if not frames:
        return pd.DataFrame()
    df = pd.concat(frames, ignore_index=True)
    df.to_csv(Path(save_dir) / "top_features.csv", index=False)
    return df


def export_tuning_metrics(tuning_results: dict, save_dir: Path):
    for model_name, result in tuning_results.items():
        result.collect_metrics().to_csv(
            Path(save_dir) / f"tuning_{_slug(model_name)}.csv", index=False
        )


def _slug(name: str) -> str:
    return "".join(ch if ch.isalnum() else "_" for ch in name.lower()).strip("_")
