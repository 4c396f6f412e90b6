from .models import Algebraic, EarningsParams


def compute_work_life_factor(earnings_params: EarningsParams, derived_yfs: float) -> float:
    """Work life factor (WLE / YFS) as a percentage, for reporting."""
    if derived_yfs <= 0:
        return 0.0
    return earnings_params.wle / derived_yfs * 100


def resolve_fringe(earnings_params: EarningsParams, is_union_mode: bool):
    """Return (fringe_factor, flat_fringe_amount) for the case's fringe model."""
    model = earnings_params.fringe_model(is_union_mode)
    fringe_factor, flat_amount = model.resolve(earnings_params.base_earnings)
    if not earnings_params.enable_fringe_benefits:
        return 1.0, flat_amount
    return fringe_factor, flat_amount


def compute_algebraic(earnings_params: EarningsParams, derived_yfs: float,
                      is_union_mode: bool) -> Algebraic:
    """
    Combine the economic rates into the two composite multipliers.

    The full multiplier applies to projected (but-for) gross earnings:

        WLF x (1 - UR x (1 - UI)) x (1 - fed tax) x (1 - state tax) x (1 + fringe)

    The realized multiplier applies to earnings that were actually received,
    so worklife and unemployment risk are left out:

        (1 - fed tax) x (1 - state tax) x (1 + fringe)
    """
    wlf = earnings_params.wle / derived_yfs if derived_yfs > 0 else 0.0

    unemp_factor = 1 - (earnings_params.unemployment_rate / 100) * (
        1 - earnings_params.ui_replacement_rate / 100)

    after_tax_factor = (1 - earnings_params.fed_tax_rate / 100) * (
        1 - earnings_params.state_tax_rate / 100)

    fringe_factor, flat_fringe_amount = resolve_fringe(earnings_params, is_union_mode)

    return Algebraic(
        wlf=wlf,
        unemp_factor=unemp_factor,
        after_tax_factor=after_tax_factor,
        fringe_factor=fringe_factor,
        full_multiplier=wlf * unemp_factor * after_tax_factor * fringe_factor,
        realized_multiplier=after_tax_factor * fringe_factor,
        combined_tax_rate=1 - after_tax_factor,
        yfs=derived_yfs,
        flat_fringe_amount=flat_fringe_amount,
    )
