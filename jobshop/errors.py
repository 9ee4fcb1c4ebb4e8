"""ShopSolver — Exceptions."""


class JobShopError(Exception):
    """Base class for solver-side failures."""


class ModelBuildError(JobShopError):
    """The constraint model or its solution is inconsistent with the dataset.

    Raised for builder defects, never for bad input: datasets are validated
    by the pydantic models before a model is built.
    """
