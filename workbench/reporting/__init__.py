from .figures import plot_metric_by_scheme, plot_wins_losses

__all__ = ["plot_metric_by_scheme", "plot_wins_losses"]
