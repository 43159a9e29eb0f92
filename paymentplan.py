# Copyright (C) Inco - All Rights Reserved.
#
# Written by the Inco credit team, October 2026.
#
# Unauthorized copying of this file, via any medium, is strictly prohibited. Proprietary and confidential.
#
# [PAYMENT PLAN]
#
# This module prices consumer credit contracts with fixed installments, under Brazilian rules. Given a requested
# amount and a maximum number of installments, it answers "how much is each installment, if the customer pays in
# 1, 2, ..., N installments?". For each count it also reports the IOF, the debit service (interest), the amounts
# settled to the merchant, and the rates the regulator requires us to disclose, EIR and TEC.
#
# The hard part is the IOF. The tax is levied on the financed amount, and the financed amount includes the tax. So the
# installment depends on the IOF, and the IOF depends on the installment. We don't solve this with a tolerance loop.
# The reference tables from our partners were produced with exactly seven passes, with intermediate rounding at fixed
# places. Changing either gives results that differ by cents.
#
# [STRATEGIES]
#
# Three calculation strategies exist, one per partner. They agree on inputs, outputs, validation, and on the rules
# that stop the installment count sweep. They disagree on the formulas.
#
#   • BMP, a closed form. Indexes are discounted by the monthly rate on a 30 day month. The IOF is computed from the
#     amortization without interest. There is no convergence.
#
#   • Iterative, the seven pass procedure with intermediate rounding. The default. Supports business day only
#     schedules. Also emits a Price table of invoices and the paid IOF.
#
#   • QiTech, the seven pass procedure without intermediate rounding of the schedule.
#
# [ROUNDING]
#
# Everything here is binary floating point, not "decimal.Decimal". Partner tables are generated in binary floating
# point, and we must match them to the last cent. Rounding is half away from zero, at the places each strategy
# dictates. See "_round".
#
# [WEAKNESSES]
#
#   • The three strategies round the IOF differently. The Iterative way is the reference for the public
#     "calculate_iof" routine. The QiTech way is kept inside its class. Nobody reconciled them.
#
#   • The default holiday table only knows national bank holidays. Municipal holidays are the caller's business,
#     through the "is_bizz_day_cb" callback.
#

'''
Payment plan calculation library.

Generates installment plans for consumer credit operations: for each installment count, from one up to the
requested maximum, the installment amount, IOF, debit service, merchant settlement, and the effective interest rate
(EIR) and total effective cost (TEC), monthly and yearly.

Also generates down payment plans. A down payment is a short sequence of plain installments paid before the main
contract starts. Each down payment length carries the full plan of the main contract that follows it.

Schedules may roll over non business days. The business day predicate is injectable.
'''

# Python.
import math
import sys
import types
import typing as t
import decimal
import logging
import datetime
import functools
import dataclasses
import importlib.metadata

# Libs.
import scipy.optimize
import typeguard
import dateutil.easter
import dateutil.relativedelta

# Payment plan version (http://versioningit.readthedocs.io/en/stable/runtime-version.html).
__version__ = importlib.metadata.version('paymentplan') if 'paymentplan' in importlib.metadata.packages_distributions() else 'DEV'

# Logger object.
_LOG = logging.getLogger('paymentplan')

# One as decimal.
_1 = decimal.Decimal(1)

# A month.
_MONTH = dateutil.relativedelta.relativedelta(months=1)

# A day.
_DAY = datetime.timedelta(days=1)

# Calendar year, in days.
_DAYS_PER_YEAR = 365

# Business year, in days.
_BUSINESS_DAYS_PER_YEAR = 252

# IOF accrues for at most one year.
_IOF_DAYS_CAP = 365

# Thirty days as a fraction of a calendar year, 30/365.
_MONTH_AS_YEAR_FRACTION = 0.0821917808219178

# A month as a fraction of a year, 1/12.
_MONTH_AS_TWELFTH = 0.08333333333333333

# Initial guess, maximum iterations, and tolerance of the XIRR solver.
_XIRR_GUESS = 0.1

_XIRR_MAX_ITERATIONS = 50

_XIRR_TOLERANCE = 1e-10

# Rate brackets searched when Newton's method fails.
_XIRR_BRACKETS = (-0.99, -0.9, -0.5, 0.0, 0.5, 1.0, 5.0, 10.0, 100.0, 1000.0)

# Fixed national bank holidays, as (month, day).
_FIXED_HOLIDAYS = [(1, 1), (4, 21), (5, 1), (9, 7), (10, 12), (11, 2), (11, 15), (12, 25)]

# Movable bank holidays, as offsets in days from Easter Sunday: Carnival Monday and Tuesday, Good Friday, Corpus Christi.
_EASTER_HOLIDAYS = [-48, -47, -2, 60]

# Calculation strategies.
_PROVIDER = t.Literal['BMP', 'Iterative', 'QiTech']

# Helpers. {{{
def _round(value: float, places: int) -> float:
    '''
    Rounds a float to a number of decimal places, half away from zero.

    Scales, rounds to an integer, and scales back. That's what partner spreadsheets do, and it's not what the builtin
    "round" does. The builtin rounds half to even, on the exact binary value.

    >>> _round(0.125, 2)
    0.13
    >>> _round(-2.5, 0)
    -3.0
    '''

    if not math.isfinite(value):
        return value

    factor = 10.0 ** places

    return float(decimal.Decimal(value * factor).quantize(_1, rounding=decimal.ROUND_HALF_UP)) / factor

def _act_365(d1: datetime.date, d2: datetime.date) -> float:
    return (d2 - d1).days / _DAYS_PER_YEAR
# }}}

# Public API. Calendar. {{{
@functools.cache
@typeguard.typechecked
def get_holidays(year: int) -> t.FrozenSet[datetime.date]:
    '''
    Returns the Brazilian national bank holidays of a year.

    >>> sorted(get_holidays(2024))[:3]
    [datetime.date(2024, 1, 1), datetime.date(2024, 2, 12), datetime.date(2024, 2, 13)]
    '''

    easter = dateutil.easter.easter(year)
    lst = {datetime.date(year, month, day) for month, day in _FIXED_HOLIDAYS}

    # Black Consciousness Day became a national holiday in 2024.
    if year >= 2024:
        lst.add(datetime.date(year, 11, 20))

    for offset in _EASTER_HOLIDAYS:
        lst.add(easter + datetime.timedelta(days=offset))

    return frozenset(lst)

@typeguard.typechecked
def is_business_day(date: datetime.date) -> bool:
    '''
    Default business day predicate.

    A business day is a week day which is not a national bank holiday.

    >>> is_business_day(datetime.date(2024, 11, 15))
    False
    '''

    return date.weekday() < 5 and date not in get_holidays(date.year)

@typeguard.typechecked
def add_months(date: datetime.date, months: int) -> datetime.date:
    '''
    Adds months to a date, one at a time.

    Each step clamps to the end of the month, so adding two months is not the same as adding one month twice to a
    date at the end of the month, with a bulk "relativedelta".

    >>> add_months(datetime.date(2022, 1, 31), 2)
    datetime.date(2022, 3, 28)
    '''

    if months < 0:
        raise ValueError(f'"months" must be greater than, or equal to, zero, got {months}')

    for _ in range(months):
        date = date + _MONTH

    return date

@typeguard.typechecked
def add_days(date: datetime.date, days: int) -> datetime.date:
    '''Adds days to a date, one at a time.'''

    if days < 0:
        raise ValueError(f'"days" must be greater than, or equal to, zero, got {days}')

    for _ in range(days):
        date = date + _DAY

    return date

@typeguard.typechecked
def next_business_day(date: datetime.date, is_bizz_day_cb: t.Callable[[datetime.date], bool] = is_business_day) -> datetime.date:
    '''
    Returns the date itself, if it is a business day, or the first business day after it.

    >>> next_business_day(datetime.date(2024, 11, 15))
    datetime.date(2024, 11, 18)
    '''

    while not is_bizz_day_cb(date):
        date = date + _DAY

    return date

@functools.lru_cache(maxsize=8192)
@typeguard.typechecked
def business_day_diff(d1: datetime.date, d2: datetime.date, is_bizz_day_cb: t.Callable[[datetime.date], bool] = is_business_day) -> int:
    '''
    Counts the business days after D1, up to and including D2.

    The count is negative when D2 precedes D1. Diffs chain: the diff from A to B plus the diff from B to C is the diff
    from A to C.

    >>> business_day_diff(datetime.date(2024, 10, 23), datetime.date(2024, 11, 25), lambda x: x.weekday() < 5)
    23
    '''

    if d2 < d1:
        return -business_day_diff(d2, d1, is_bizz_day_cb)

    num = 0

    while d1 < d2:
        d1 = d1 + _DAY

        if is_bizz_day_cb(d1):
            num += 1

    return num

@typeguard.typechecked
def get_non_business_days_between(
    start: datetime.date,
    end: datetime.date,
    is_bizz_day_cb: t.Callable[[datetime.date], bool] = is_business_day
) -> t.List[datetime.date]:
    '''Returns the non business days between two dates, both inclusive.'''

    lst = []

    while start <= end:
        if not is_bizz_day_cb(start):
            lst.append(start)

        start = start + _DAY

    return lst

@typeguard.typechecked
def disbursement_date_range(
    base: datetime.date,
    days: int,
    is_bizz_day_cb: t.Callable[[datetime.date], bool] = is_business_day
) -> t.Tuple[datetime.date, datetime.date]:
    '''
    Returns the window, in business days, in which a contract may be disbursed.

    The window starts on the first business day on, or after, the base date. It ends on the business day that makes
    the window "days" business days long, its first day included.
    '''

    if days < 1:
        raise ValueError(f'"days" must be greater than, or equal to, one, got {days}')

    start = end = next_business_day(base, is_bizz_day_cb)

    for _ in range(days - 1):
        end = next_business_day(end + _DAY, is_bizz_day_cb)

    return start, end
# }}}

# Public API. Main classes. {{{
@dataclasses.dataclass(frozen=True)
class ContractRequest:
    '''
    The input of a payment plan.

      • "requested_amount" is the principal asked for by the customer. Must be positive.

      • "first_payment_date" is the due date of the first installment.

      • "requested_date" is the disbursement date, when the principal is released.

      • "installments" is the maximum installment count. Must be positive.

      • "debit_service_percentage" is the share of the debit service, from 0 to 100, borne by the merchant.

      • "mdr" is the merchant discount rate, from 0 to 1.

      • "tac_percentage" is the origination fee, as a fraction of the requested amount.

      • "iof_overall" is the flat IOF rate.

      • "iof_percentage" is the daily IOF rate.

      • "interest_rate" is the monthly interest rate, from 0 to 1.

      • "min_installment_amount" stops the sweep when an installment falls below it. The first count is exempt.

      • "max_total_amount" stops the sweep when the total amount exceeds it.

      • "disbursement_only_on_business_days" rolls the disbursement and the due dates over non business days.
    '''

    requested_amount: float

    first_payment_date: datetime.date

    requested_date: datetime.date

    installments: int

    debit_service_percentage: int = 0

    mdr: float = 0.0

    tac_percentage: float = 0.0

    iof_overall: float = 0.0038

    iof_percentage: float = 0.000082

    interest_rate: float = 0.0

    min_installment_amount: float = 0.0

    max_total_amount: float = math.inf

    disbursement_only_on_business_days: bool = False

@dataclasses.dataclass(frozen=True)
class ScheduleDay:
    '''
    The day counts of a due date, before any discounting.

      • "anchor" is the disbursement date of the schedule, shifted to a business day when the request asks for it.

      • The remaining fields mean the same as in "ScheduleEntry".
    '''

    no: int

    anchor: datetime.date

    due_date: datetime.date

    diff: int

    business_diff: int

    accumulated_days: int

    accumulated_business_days: int

@dataclasses.dataclass(frozen=True)
class ScheduleEntry:
    '''
    A row of the installment schedule.

      • "no" is the installment number, starting from one.

      • "due_date" is the date the installment is due.

      • "diff" is the number of calendar days since the previous due date, or the disbursement date.

      • "business_diff" is "diff" in business days. Mirrors "diff" unless the schedule skips non business days.

      • "accumulated_days" is the number of calendar days since the disbursement date.

      • "accumulated_business_days" is "accumulated_days" in business days.

      • "factor" is the discount factor of the installment.

      • "accumulated_factor" is the sum of the discount factors up to, and including, this row.

      • "installment_amount" is the level installment amount, were the schedule to end at this row.
    '''

    no: int

    due_date: datetime.date

    diff: int = 0

    business_diff: int = 0

    accumulated_days: int = 0

    accumulated_business_days: int = 0

    factor: float = 0.0

    accumulated_factor: float = 0.0

    installment_amount: float = 0.0

@dataclasses.dataclass
class Schedule:
    '''An installment schedule. Its amount is the installment amount of its last row.'''

    entries: t.List[ScheduleEntry] = dataclasses.field(default_factory=list)

    @property
    def last(self) -> ScheduleEntry:
        return self.entries[-1]

    @property
    def amount(self) -> float:
        return self.entries[-1].installment_amount

    @property
    def due_dates(self) -> t.List[datetime.date]:
        return [x.due_date for x in self.entries]

@dataclasses.dataclass
class ConvergenceState:
    '''
    The mutable state of the IOF convergence.

      • "main_value" is the principal discounted in the current pass: the requested amount, plus the IOF estimated
        by the previous pass.

      • "daily_rate" is the daily interest rate. It is derived once, and never changes.
    '''

    main_value: float

    daily_rate: float

@dataclasses.dataclass(frozen=True)
class CashFlow:
    '''A dated, signed cash amount. Positive amounts are received by the customer.'''

    amount: float

    date: datetime.date

@dataclasses.dataclass
class Amounts:
    '''Debit service, customer and merchant amounts derived from a converged installment.'''

    tac_amount: float = 0.0

    debit_service: float = 0.0

    customer_debit_service_proportion: float = 1.0

    customer_debit_service_amount: float = 0.0

    customer_amount: float = 0.0

    calculation_basis_for_effective_interest_rate: float = 0.0

    mdr_amount: float = 0.0

    merchant_debit_service_amount: float = 0.0

    merchant_total_amount: float = 0.0

    settled_to_merchant: float = 0.0

@dataclasses.dataclass
class Invoice:
    '''
    A row of the Price table of an iterative plan.

      • "debit_service" is the interest of the period, over the outstanding balance.

      • "main_iof_tac" is the remainder of the installment, which amortizes principal, IOF and TAC.
    '''

    due_date: datetime.date

    accumulated_days: int = 0

    factor: float = 0.0

    accumulated_factor: float = 0.0

    main_iof_tac: float = 0.0

    debit_service: float = 0.0

@dataclasses.dataclass
class PlanEntry:
    '''
    A payment plan for a given installment count.

    Carries the fields of the last schedule row of that count, and the derived amounts and rates.

      • "installment" is the installment count.

      • "days_index" and "accumulated_days_index" are the factor, and the accumulated factor, of the last row.

      • "installment_amount" is the amount of each installment.

      • "total_amount" is the sum of all installments.

      • "contract_amount" is the requested amount plus the IOF. Plus the TAC, for BMP.

      • "debit_service" is the interest. Total amount, minus the requested amount, the TAC, and the IOF.

      • "eir_monthly", "eir_yearly" are the effective interest rate. "effective_interest_rate" repeats the monthly one.

      • "tec_monthly", "tec_yearly" are the total effective cost. "total_effective_cost" repeats the monthly one.

      • "pre_disbursement_amount", "paid_total_iof", "paid_contract_amount" and "invoices" are computed by the
        Iterative strategy only.
    '''

    installment: int

    due_date: datetime.date

    disbursement_date: datetime.date

    accumulated_days: int = 0

    accumulated_business_days: int = 0

    days_index: float = 0.0

    accumulated_days_index: float = 0.0

    interest_rate: float = 0.0

    installment_amount: float = 0.0

    installment_amount_without_tac: float = 0.0

    total_amount: float = 0.0

    debit_service: float = 0.0

    customer_debit_service_amount: float = 0.0

    customer_amount: float = 0.0

    calculation_basis_for_effective_interest_rate: float = 0.0

    merchant_debit_service_amount: float = 0.0

    merchant_total_amount: float = 0.0

    settled_to_merchant: float = 0.0

    mdr_amount: float = 0.0

    effective_interest_rate: float = 0.0

    total_effective_cost: float = 0.0

    eir_monthly: float = 0.0

    eir_yearly: float = 0.0

    tec_monthly: float = 0.0

    tec_yearly: float = 0.0

    total_iof: float = 0.0

    contract_amount: float = 0.0

    contract_amount_without_tac: float = 0.0

    tac_amount: float = 0.0

    iof_percentage: float = 0.0

    overall_iof: float = 0.0

    pre_disbursement_amount: t.Optional[float] = None

    paid_total_iof: t.Optional[float] = None

    paid_contract_amount: t.Optional[float] = None

    invoices: t.List[Invoice] = dataclasses.field(default_factory=list)

@dataclasses.dataclass(frozen=True)
class DownPaymentRequest:
    '''
    The input of a down payment plan.

      • "params" is the request of the main contract. Its dates are overridden for each down payment length.

      • "requested_amount" is the down payment amount.

      • "min_installment_amount" is the minimum down payment installment. The first count is exempt.

      • "first_payment_date" is the due date of the first down payment installment.

      • "installments" is the maximum down payment installment count.
    '''

    params: ContractRequest

    requested_amount: float

    min_installment_amount: float

    first_payment_date: datetime.date

    installments: int

@dataclasses.dataclass
class DownPaymentEntry:
    '''A down payment length, and the plans of the main contract that starts after it.'''

    installment_amount: float

    total_amount: float

    installment_quantity: int

    first_payment_date: datetime.date

    plans: t.List[PlanEntry] = dataclasses.field(default_factory=list)
# }}}

# Public API. Errors. {{{
class PaymentPlanError(Exception):
    pass

class InvalidRequestedAmount(PaymentPlanError):
    def __init__(self, message: str = 'Requested amount must be greater than 0'):
        super().__init__(message)

class InvalidNumberOfInstallments(PaymentPlanError):
    def __init__(self, message: str = 'Number of installments must be greater than 0'):
        super().__init__(message)

class RateSolverFailure(PaymentPlanError):
    '''The rate solver found no rate for a cash flow series. Keeps the request, for diagnostics.'''

    def __init__(self, message: str, request: ContractRequest):
        super().__init__(message)

        self.request = request

class NoSolution(Exception):
    pass
# }}}

# Public API. Schedule, IOF and convergence. {{{
@functools.lru_cache(maxsize=1024)
@typeguard.typechecked
def get_schedule_days(request: ContractRequest, is_bizz_day_cb: t.Callable[[datetime.date], bool] = is_business_day) -> t.Tuple[ScheduleDay, ...]:
    '''
    Walks the due dates of a request, and counts the days between them.

    Returns a tuple of "ScheduleDay", one per installment. The result is cached, and shared by every caller, hence
    immutable.

    In plain mode, due dates step one month at a time from the first payment date, and business days mirror calendar
    days. In business day mode, the disbursement date and each due date roll over to the next business day. Due
    dates are always derived from the unshifted first payment date, so a shift never accumulates.
    '''

    lst = []
    business = request.disbursement_only_on_business_days

    # 1. Anchor.
    anchor = next_business_day(request.requested_date, is_bizz_day_cb) if business else request.requested_date
    prev = anchor
    acc_business_days = 0

    # 2. Walk.
    for i in range(request.installments):
        due = add_months(request.first_payment_date, i)

        if business:
            due = next_business_day(due, is_bizz_day_cb)

        diff = (due - prev).days
        business_diff = business_day_diff(prev, due, is_bizz_day_cb) if business else diff
        acc_business_days += business_diff

        lst.append(ScheduleDay(
            no=i + 1,
            anchor=anchor,
            due_date=due,
            diff=diff,
            business_diff=business_diff,
            accumulated_days=(due - anchor).days,
            accumulated_business_days=acc_business_days
        ))

        prev = due

    return tuple(lst)

@typeguard.typechecked
def build_schedule(
    main_value: float,
    daily_rate: float,
    request: ContractRequest, *,
    is_bizz_day_cb: t.Callable[[datetime.date], bool] = is_business_day
) -> Schedule:
    '''
    Builds the installment schedule for a principal and a daily interest rate.

    Each row discounts its installment by "(1 / (1 + daily_rate)) ^ days", where "days" is the number of days since
    disbursement: business days, when the request skips non business days; calendar days otherwise. The factor is
    rounded to 15 places. The installment of the row levels the principal over the accumulated factor, rounded to
    cents.
    '''

    entries = []
    base = 1 / (1 + daily_rate)
    acc_factor = 0.0

    for x in get_schedule_days(request, is_bizz_day_cb):
        factor = _round(base ** x.accumulated_business_days, 15)
        acc_factor += factor

        kwa: t.Dict[str, t.Any] = {}

        kwa['no'] = x.no
        kwa['due_date'] = x.due_date
        kwa['diff'] = x.diff
        kwa['business_diff'] = x.business_diff
        kwa['accumulated_days'] = x.accumulated_days
        kwa['accumulated_business_days'] = x.accumulated_business_days
        kwa['factor'] = factor
        kwa['accumulated_factor'] = acc_factor
        kwa['installment_amount'] = _round(main_value / acc_factor, 2)

        entries.append(ScheduleEntry(**kwa))

    return Schedule(entries)

@typeguard.typechecked
def calculate_iof(state: ConvergenceState, schedule: Schedule, request: ContractRequest) -> float:
    '''
    Calculates the IOF of a schedule.

    Walks the principal forward, installment by installment. For each installment, the interest of the period, or
    fee, is taken out of the installment. The remainder is the principal amortized by the installment, and it is what
    IOF is levied on.

      • A flat part, the remainder times "request.iof_overall", rounded to cents.

      • A daily part, the remainder times the accumulated days, capped to a year, times "request.iof_percentage",
        rounded to eight places.

    The fee is rounded to seven places, the remainder and the running principal to eight places. On business day
    schedules, the last remainder closes the principal exactly, instead of being derived from the fee.

    Returns the total IOF, rounded to cents.
    '''

    total = 0.0
    acc_without_fee = 0.0
    main_value = state.main_value
    running = _round(main_value, 8)
    amount = schedule.amount
    last = len(schedule.entries) - 1
    closes = request.disbursement_only_on_business_days

    for j, x in enumerate(schedule.entries):
        fee = _round(running * ((1.0 + state.daily_rate) ** x.business_diff - 1.0), 7)

        if closes and j == last:
            without_fee = main_value - acc_without_fee

        else:
            without_fee = amount - fee

        without_fee = _round(without_fee, 8)

        main_iof = _round(without_fee * request.iof_overall, 2)
        daily_iof = _round(without_fee * min(x.accumulated_days, _IOF_DAYS_CAP) * request.iof_percentage, 8)

        total += main_iof + daily_iof
        running = _round(running + fee - amount, 8)
        acc_without_fee += without_fee

    return _round(total, 2)

@typeguard.typechecked
def converge(
    request: ContractRequest,
    state: ConvergenceState, *,
    passes: int,
    build_cb: t.Callable[[ConvergenceState], Schedule],
    iof_cb: t.Callable[[ConvergenceState, Schedule], float]
) -> types.SimpleNamespace:
    '''
    Finds the installment amount and the IOF embedded in it.

    Runs a fixed number of passes. Each pass builds the schedule for the current principal, calculates its IOF, and
    makes the principal of the next pass the requested amount plus that IOF. Then builds the schedule one last time.

    Returns an object with three fields.

      • "schedule", the final schedule.

      • "total_iof", the IOF of the last pass.

      • "first_amount", the installment amount of the first pass, which discounts the requested amount alone.
    '''

    if passes < 1:
        raise ValueError(f'"passes" must be greater than, or equal to, one, got {passes}')

    first_amount: t.Optional[float] = None
    total_iof = 0.0

    for _ in range(passes):
        schedule = build_cb(state)
        total_iof = iof_cb(state, schedule)

        if first_amount is None:
            first_amount = schedule.amount

        state.main_value = request.requested_amount + total_iof

    return types.SimpleNamespace(schedule=build_cb(state), total_iof=total_iof, first_amount=first_amount)

@typeguard.typechecked
def calculate_amounts(request: ContractRequest, total_amount: float, total_iof: float) -> Amounts:
    '''
    Derives the debit service, customer and merchant amounts.

    The installment count is the one in the request. The debit service splits between customer and merchant according
    to "request.debit_service_percentage", the merchant share.
    '''

    out = Amounts()
    num = request.installments
    requested = request.requested_amount

    out.tac_amount = tac = requested * request.tac_percentage
    out.customer_debit_service_proportion = prop = 1.0 - request.debit_service_percentage / 100.0
    out.debit_service = total_amount - requested - tac - total_iof
    out.customer_debit_service_amount = out.debit_service * prop
    out.customer_amount = (requested + (out.debit_service + tac) * prop + total_iof) / num
    out.calculation_basis_for_effective_interest_rate = (requested + out.debit_service * prop) / num
    out.mdr_amount = requested * request.mdr
    out.merchant_debit_service_amount = (out.debit_service + tac) * request.debit_service_percentage / 100.0
    out.merchant_total_amount = out.merchant_debit_service_amount + out.mdr_amount
    out.settled_to_merchant = requested - out.merchant_total_amount

    return out

@typeguard.typechecked
def get_price_invoices(schedule: Schedule, contract_amount: float, installment_amount: float, interest_rate: float) -> t.List[Invoice]:
    '''
    Splits each installment of a schedule into interest and amortization, as in a Price table.

    The balance starts at the contract amount and accrues the monthly interest rate.
    '''

    lst = []
    bal = contract_amount

    for x in schedule.entries:
        gain = bal * interest_rate
        amort = installment_amount - gain
        bal -= amort

        lst.append(Invoice(
            due_date=x.due_date,
            accumulated_days=x.accumulated_days,
            factor=x.factor,
            accumulated_factor=x.accumulated_factor,
            main_iof_tac=amort,
            debit_service=gain
        ))

    return lst
# }}}

# Public API. Rates. {{{
@typeguard.typechecked
def xirr(
    cash_flows: t.List[CashFlow], *,
    year_fraction_cb: t.Callable[[datetime.date, datetime.date], float] = _act_365
) -> float:
    '''
    Computes the money weighted rate of return of a dated cash flow series.

    The rate is per year, as measured by "year_fraction_cb". The default measures calendar days over a 365 day year.
    Flows are discounted to the earliest date.

    Tries Newton's method first, from a 10% guess. If it doesn't converge, looks for a sign change of the net present
    value over a fixed set of brackets, and uses Brent's method. Raises "NoSolution" if the series has no positive, or
    no negative, amount; or if no rate is found.

    >>> round(xirr([CashFlow(-100.0, datetime.date(2023, 1, 1)), CashFlow(110.0, datetime.date(2024, 1, 1))]), 6)
    0.1
    '''

    # 1. Validate.
    if not any(x.amount > 0 for x in cash_flows) or not any(x.amount < 0 for x in cash_flows):
        raise NoSolution('negative and positive payments are required')

    # 2. Measure time.
    flows = sorted(cash_flows, key=lambda x: x.date)
    d0 = flows[0].date
    lst = [(x.amount, year_fraction_cb(d0, x.date)) for x in flows]

    def xnpv(rate: float) -> float:
        if rate <= -1.0:
            return math.nan

        val = 0.0

        for amount, frac in lst:
            val += amount / (1.0 + rate) ** frac

        return val

    def xnpv_prime(rate: float) -> float:
        if rate <= -1.0:
            return math.nan

        val = 0.0

        for amount, frac in lst:
            val -= frac * amount / (1.0 + rate) ** (frac + 1.0)

        return val

    # 3. Solve, Newton.
    try:
        rate = float(scipy.optimize.newton(xnpv, _XIRR_GUESS, fprime=xnpv_prime, tol=_XIRR_TOLERANCE, maxiter=_XIRR_MAX_ITERATIONS))

    except (RuntimeError, OverflowError, ZeroDivisionError) as exc:
        _LOG.debug(f'Newton did not converge on the XIRR: {exc}')

        rate = math.nan

    if math.isfinite(rate) and rate > -1.0:
        return rate

    # 4. Solve, Brent.
    for a, b in zip(_XIRR_BRACKETS, _XIRR_BRACKETS[1:]):
        try:
            fa, fb = xnpv(a), xnpv(b)

        except OverflowError:
            continue

        if math.isfinite(fa) and math.isfinite(fb) and fa * fb <= 0:
            return float(scipy.optimize.brentq(xnpv, a, b, xtol=1e-14, maxiter=500))

    raise NoSolution('no rate brackets the net present value')

def _solve_monthly_rate(
    request: ContractRequest,
    flows: t.List[CashFlow],
    potency: float,
    year_fraction_cb: t.Callable[[datetime.date, datetime.date], float]
) -> float:
    try:
        rate = xirr(flows, year_fraction_cb=year_fraction_cb)

    except NoSolution as exc:
        _LOG.warning(f'rate solver failed ({exc}), retrying with negated cash flows')

        try:
            rate = xirr([CashFlow(-x.amount, x.date) for x in flows], year_fraction_cb=year_fraction_cb)

        except NoSolution as exc:
            raise RateSolverFailure(f'Calculation error: {exc}', request) from exc

    monthly = (1.0 + rate) ** potency - 1.0

    if math.isnan(monthly):
        raise RateSolverFailure('Calculation error: the monthly rate is not a number', request)

    return monthly

@typeguard.typechecked
def calculate_eir_monthly(
    request: ContractRequest,
    disbursement_date: datetime.date,
    due_dates: t.List[datetime.date],
    amount: float,
    customer_debit_service_proportion: float, *,
    potency: float = _MONTH_AS_YEAR_FRACTION,
    year_fraction_cb: t.Callable[[datetime.date, datetime.date], float] = _act_365
) -> float:
    '''
    Calculates the monthly effective interest rate, EIR.

    The series is the requested amount, received at disbursement, against "amount" paid at each due date. The amount
    excludes IOF and TAC. Those belong to the TEC.

    The EIR is zero if the customer bears no debit service, or if the first payment falls on the disbursement date.
    '''

    if not 0.0 < customer_debit_service_proportion <= 1.0:
        return 0.0

    if (due_dates[0] - disbursement_date).days <= 0:
        return 0.0

    flows = [CashFlow(request.requested_amount, disbursement_date)]

    flows.extend(CashFlow(-amount, x) for x in due_dates)

    return _solve_monthly_rate(request, flows, potency, year_fraction_cb)

@typeguard.typechecked
def calculate_tec_monthly(
    request: ContractRequest,
    disbursement_date: datetime.date,
    due_dates: t.List[datetime.date],
    amount: float, *,
    potency: float = _MONTH_AS_YEAR_FRACTION,
    year_fraction_cb: t.Callable[[datetime.date, datetime.date], float] = _act_365
) -> float:
    '''
    Calculates the monthly total effective cost, TEC.

    The series is the requested amount, received at disbursement, against "amount" paid at each due date. The amount
    includes IOF and TAC.

    The TEC is zero for a single installment paid on the disbursement date.
    '''

    if len(due_dates) <= 1 and due_dates[0] == disbursement_date:
        return 0.0

    flows = [CashFlow(request.requested_amount, disbursement_date)]

    flows.extend(CashFlow(-amount, x) for x in due_dates)

    return _solve_monthly_rate(request, flows, potency, year_fraction_cb)
# }}}

# Public API. Strategies. {{{
class PaymentPlan:
    '''
    Base class of the calculation strategies.

    Validates the request, and sweeps the installment count from one to "request.installments". Each strategy
    computes one plan entry per count, in "calculate_installment". The sweep stops, discarding the entry, when:

      • the installment amount falls below "request.min_installment_amount", except for the first count;

      • the total amount exceeds "request.max_total_amount".

    Any error aborts the sweep. Partial results are never returned.
    '''

    def __init__(self, is_bizz_day_cb: t.Callable[[datetime.date], bool] = is_business_day):
        self.is_bizz_day_cb = is_bizz_day_cb

    def calculate_installment(self, request: ContractRequest) -> PlanEntry:
        '''Returns the plan entry for the installment count of the request.'''

        raise NotImplementedError()

    def calculate_payment_plan(self, request: ContractRequest) -> t.List[PlanEntry]:
        lst: t.List[PlanEntry] = []

        # 1. Validate.
        if request.requested_amount <= 0:
            raise InvalidRequestedAmount()

        if request.installments <= 0:
            raise InvalidNumberOfInstallments()

        # 2. Sweep.
        for i in range(1, request.installments + 1):
            entry = self.calculate_installment(dataclasses.replace(request, installments=i))

            _LOG.debug(f'{type(self).__name__}: {i} installment(s) of {entry.installment_amount}, total {entry.total_amount}')

            if entry.installment_amount < request.min_installment_amount and i != 1:
                _LOG.info(f'installment amount {entry.installment_amount} is below the minimum, {request.min_installment_amount}, at {i} installments')

                break

            if entry.total_amount > request.max_total_amount:
                _LOG.info(f'total amount {entry.total_amount} exceeds the maximum, {request.max_total_amount}, at {i} installments')

                break

            lst.append(entry)

        return lst

    def calculate_down_payment_plan(self, request: DownPaymentRequest) -> t.List[DownPaymentEntry]:
        '''
        Calculates a down payment plan.

        A down payment is much simpler than the contract that follows it. Its installment is the down payment amount
        divided by the installment count, no interest, no tax. The count goes from one up to "request.installments",
        until the installment falls below "request.min_installment_amount". The first count is exempt.

        The main contract starts one day after the first down payment installment, and its first payment is due one
        month after it. Each extra down payment installment pushes both dates one month further. For each count, the
        whole payment plan of the main contract is computed with the pushed dates.
        '''

        lst: t.List[DownPaymentEntry] = []

        # 1. Validate.
        if request.requested_amount <= 0:
            raise InvalidRequestedAmount()

        if request.installments <= 0:
            raise InvalidNumberOfInstallments()

        # 2. Sweep.
        start_date = add_days(request.first_payment_date, 1)
        first_payment_date = add_months(request.first_payment_date, 1)

        for i in range(1, request.installments + 1):
            amount = request.requested_amount / i

            if amount < request.min_installment_amount and i != 1:
                break

            kwa: t.Dict[str, t.Any] = {}

            kwa['installment_amount'] = amount
            kwa['total_amount'] = request.requested_amount
            kwa['installment_quantity'] = i
            kwa['first_payment_date'] = request.first_payment_date
            kwa['plans'] = self.calculate_payment_plan(dataclasses.replace(request.params, requested_date=start_date, first_payment_date=first_payment_date))

            lst.append(DownPaymentEntry(**kwa))

            start_date = add_months(start_date, 1)
            first_payment_date = add_months(first_payment_date, 1)

        return lst

    def _get_rates(
        self,
        request: ContractRequest,
        disbursement_date: datetime.date,
        due_dates: t.List[datetime.date],
        eir_amount: float,
        tec_amount: float,
        proportion: float,
        potency: float = _MONTH_AS_YEAR_FRACTION,
        year_fraction_cb: t.Callable[[datetime.date, datetime.date], float] = _act_365
    ) -> types.SimpleNamespace:
        kwa: t.Dict[str, t.Any] = {}

        kwa['potency'] = potency
        kwa['year_fraction_cb'] = year_fraction_cb

        eir_monthly = calculate_eir_monthly(request, disbursement_date, due_dates, eir_amount, proportion, **kwa)
        tec_monthly = calculate_tec_monthly(request, disbursement_date, due_dates, tec_amount, **kwa)

        return types.SimpleNamespace(
            eir_monthly=eir_monthly,
            eir_yearly=(1.0 + eir_monthly) ** 12 - 1.0,
            tec_monthly=tec_monthly,
            tec_yearly=(1.0 + tec_monthly) ** 12 - 1.0
        )

class BMP(PaymentPlan):
    '''
    Closed form strategy.

    Each due date gets an index, the monthly rate discounted over the accumulated days, as a fraction of a 30 day
    month. The contract amount, the requested amount plus TAC plus IOF, divided by the accumulated index, is the
    installment. The IOF is estimated from the amortization without interest, so there's no convergence.
    '''

    def build_schedule(self, contract_amount: float, request: ContractRequest) -> Schedule:
        entries: t.List[ScheduleEntry] = []
        base = 1.0 / (1.0 + request.interest_rate)

        for x in get_schedule_days(request, self.is_bizz_day_cb):
            factor = base ** (x.accumulated_days / 30.0)
            acc_factor = factor

            # Current index first, then the previous ones.
            for y in entries:
                acc_factor += y.factor

            kwa: t.Dict[str, t.Any] = {}

            kwa['no'] = x.no
            kwa['due_date'] = x.due_date
            kwa['diff'] = x.diff
            kwa['business_diff'] = x.business_diff
            kwa['accumulated_days'] = x.accumulated_days
            kwa['accumulated_business_days'] = x.accumulated_business_days
            kwa['factor'] = factor
            kwa['accumulated_factor'] = acc_factor
            kwa['installment_amount'] = contract_amount * (1.0 / acc_factor)

            entries.append(ScheduleEntry(**kwa))

        return Schedule(entries)

    def calculate_iof(self, request: ContractRequest, accumulated_days: t.List[int]) -> float:
        '''
        Estimates the IOF from the amortization without interest.

        The amortization is the requested amount plus TAC, divided by the installment count, rounded to cents. The
        flat part is levied on all of it. The daily part is levied per installment, on the accumulated days. Past 364
        days, a full year is charged.
        '''

        num = len(accumulated_days)
        tac = request.requested_amount * request.tac_percentage
        base = _round((request.requested_amount + tac) / num + sys.float_info.epsilon, 2)
        contract_iof = base * num * request.iof_overall
        daily_iof = 0.0

        for days in accumulated_days:
            if days > 364:
                daily_iof += base * (_IOF_DAYS_CAP * request.iof_percentage)

            else:
                daily_iof += days * base * request.iof_percentage

        return contract_iof + daily_iof

    def calculate_installment(self, request: ContractRequest) -> PlanEntry:
        days = get_schedule_days(request, self.is_bizz_day_cb)
        requested = request.requested_amount
        tac = requested * request.tac_percentage

        # 1. IOF, and the contract amounts.
        total_iof = self.calculate_iof(request, [x.accumulated_days for x in days])
        contract_amount = requested + tac + total_iof
        contract_amount_without_tac = requested + total_iof

        # 2. Installment.
        schedule = self.build_schedule(contract_amount, request)
        installment_amount = schedule.amount
        total_amount = installment_amount * request.installments
        amounts = calculate_amounts(request, total_amount, total_iof)

        # 3. Rates.
        rates = self._get_rates(
            request,
            days[0].anchor,
            schedule.due_dates,
            amounts.calculation_basis_for_effective_interest_rate,
            amounts.customer_amount,
            amounts.customer_debit_service_proportion
        )

        return PlanEntry(
            installment=request.installments,
            due_date=schedule.last.due_date,
            disbursement_date=days[0].anchor,
            accumulated_days=schedule.last.accumulated_days,
            accumulated_business_days=schedule.last.accumulated_business_days,
            days_index=schedule.last.factor,
            accumulated_days_index=schedule.last.accumulated_factor,
            interest_rate=request.interest_rate,
            installment_amount=installment_amount,
            installment_amount_without_tac=contract_amount_without_tac * (1.0 / schedule.last.accumulated_factor),
            total_amount=total_amount,
            debit_service=amounts.debit_service,
            customer_debit_service_amount=amounts.customer_debit_service_amount,
            customer_amount=amounts.customer_amount,
            calculation_basis_for_effective_interest_rate=amounts.calculation_basis_for_effective_interest_rate,
            merchant_debit_service_amount=amounts.merchant_debit_service_amount,
            merchant_total_amount=amounts.merchant_total_amount,
            settled_to_merchant=amounts.settled_to_merchant,
            mdr_amount=amounts.mdr_amount,
            effective_interest_rate=rates.eir_monthly,
            total_effective_cost=rates.tec_monthly,
            eir_monthly=rates.eir_monthly,
            eir_yearly=rates.eir_yearly,
            tec_monthly=rates.tec_monthly,
            tec_yearly=rates.tec_yearly,
            total_iof=total_iof,
            contract_amount=contract_amount,
            contract_amount_without_tac=contract_amount_without_tac,
            tac_amount=tac,
            iof_percentage=request.iof_percentage,
            overall_iof=request.iof_overall
        )

class Iterative(PaymentPlan):
    '''
    Seven pass strategy, with intermediate rounding. The recommended one.

    Slower than BMP, but its IOF matches what is actually levied. Supports business day only schedules: when the
    request asks for them, time is measured in business days over a 252 day year, both to discount installments and
    to solve rates.

    Besides the plan, computes the present value of the installments at the contract rate, the IOF actually paid, and
    a Price table of invoices.
    '''

    _PASSES = 7

    _DAILY_RATE_PLACES = 10

    _CALENDAR_DAY_POTENCY = 1 / 30

    _BUSINESS_DAY_POTENCY = 0.003968253968253968  # 1/252.

    def get_daily_rate(self, request: ContractRequest) -> float:
        r = request.interest_rate

        if request.disbursement_only_on_business_days:
            annual = (1.0 + r) ** 12 - 1.0

            return _round((1.0 + annual) ** self._BUSINESS_DAY_POTENCY - 1.0, self._DAILY_RATE_PLACES)

        return _round((1.0 + r) ** self._CALENDAR_DAY_POTENCY - 1.0, self._DAILY_RATE_PLACES)

    def get_present_value(self, schedule: Schedule, installment_amount: float, request: ContractRequest) -> float:
        val = 0.0

        if request.disbursement_only_on_business_days:
            annual = (1.0 + request.interest_rate) ** 12

            for x in schedule.entries:
                val += installment_amount / annual ** (x.accumulated_business_days / _BUSINESS_DAYS_PER_YEAR)

        else:
            for x in schedule.entries:
                val += installment_amount / (1.0 + request.interest_rate) ** (x.accumulated_days / 30.0)

        return val

    def calculate_installment(self, request: ContractRequest) -> PlanEntry:
        business = request.disbursement_only_on_business_days
        requested = request.requested_amount
        disbursement_date = get_schedule_days(request, self.is_bizz_day_cb)[0].anchor

        # 1. Converge.
        kwa: t.Dict[str, t.Any] = {}

        kwa['passes'] = self._PASSES
        kwa['build_cb'] = lambda s: build_schedule(s.main_value, s.daily_rate, request, is_bizz_day_cb=self.is_bizz_day_cb)
        kwa['iof_cb'] = lambda s, x: calculate_iof(s, x, request)

        res = converge(request, ConvergenceState(main_value=requested, daily_rate=self.get_daily_rate(request)), **kwa)

        total_iof = _round(res.total_iof, 2)
        schedule = res.schedule
        installment_amount = schedule.amount
        total_amount = _round(installment_amount * request.installments, 2)
        contract_amount = requested + total_iof
        amounts = calculate_amounts(request, total_amount, total_iof)

        # 2. Rates. The EIR discounts the installment of the first pass, which has no IOF in it. Cash flows are
        # always dated on calendar days, only the monthly conversion depends on the mode.
        potency = _MONTH_AS_TWELFTH if business else _MONTH_AS_YEAR_FRACTION

        rates = self._get_rates(
            request,
            disbursement_date,
            schedule.due_dates,
            res.first_amount,
            installment_amount,
            amounts.customer_debit_service_proportion,
            potency
        )

        # 3. Paid IOF.
        present_value = _round(self.get_present_value(schedule, installment_amount, request), 2)
        pre_disbursement_amount = _round(present_value - total_iof, 2)
        paid_total_iof = _round(total_iof + _round(pre_disbursement_amount - requested, 2), 2)

        return PlanEntry(
            installment=request.installments,
            due_date=schedule.last.due_date,
            disbursement_date=disbursement_date,
            accumulated_days=schedule.last.accumulated_days,
            accumulated_business_days=schedule.last.accumulated_business_days,
            days_index=schedule.last.factor,
            accumulated_days_index=schedule.last.accumulated_factor,
            interest_rate=request.interest_rate,
            installment_amount=installment_amount,
            total_amount=total_amount,
            debit_service=amounts.debit_service,
            customer_debit_service_amount=amounts.customer_debit_service_amount,
            customer_amount=installment_amount,
            calculation_basis_for_effective_interest_rate=amounts.calculation_basis_for_effective_interest_rate,
            merchant_debit_service_amount=amounts.merchant_debit_service_amount,
            merchant_total_amount=amounts.merchant_total_amount,
            settled_to_merchant=amounts.settled_to_merchant,
            mdr_amount=amounts.mdr_amount,
            effective_interest_rate=_round(rates.eir_monthly, 4),
            total_effective_cost=_round(rates.tec_monthly, 4),
            eir_monthly=_round(rates.eir_monthly, 4),
            eir_yearly=_round(rates.eir_yearly, 6),
            tec_monthly=_round(rates.tec_monthly, 4),
            tec_yearly=_round(rates.tec_yearly, 6),
            total_iof=total_iof,
            contract_amount=contract_amount,
            tac_amount=amounts.tac_amount,
            iof_percentage=request.iof_percentage,
            overall_iof=request.iof_overall,
            pre_disbursement_amount=pre_disbursement_amount,
            paid_total_iof=paid_total_iof,
            paid_contract_amount=requested + paid_total_iof,
            invoices=get_price_invoices(schedule, contract_amount, installment_amount, request.interest_rate)
        )

class QiTech(PaymentPlan):
    '''
    Seven pass strategy, without rounding of the schedule.

    Each pass calculates the IOF, building the schedule for the current principal on its own. The fee is not rounded,
    and the remainder of the last installment is not forced to close the principal.
    '''

    _PASSES = 7

    _DAILY_RATE_PLACES = 8

    _POTENCY = 1 / 30

    def get_daily_rate(self, request: ContractRequest) -> float:
        return _round((1.0 + request.interest_rate) ** self._POTENCY - 1.0, self._DAILY_RATE_PLACES)

    def build_schedule(self, main_value: float, daily_rate: float, request: ContractRequest) -> Schedule:
        entries = []
        acc_factor = 0.0

        for x in get_schedule_days(request, self.is_bizz_day_cb):
            factor = 1.0 / (1.0 + daily_rate) ** x.accumulated_business_days
            acc_factor += factor

            entries.append(ScheduleEntry(
                no=x.no,
                due_date=x.due_date,
                diff=x.diff,
                business_diff=x.business_diff,
                accumulated_days=x.accumulated_days,
                accumulated_business_days=x.accumulated_business_days,
                factor=factor,
                accumulated_factor=acc_factor,
                installment_amount=main_value / acc_factor
            ))

        return Schedule(entries)

    def calculate_iof(self, state: ConvergenceState, request: ContractRequest) -> float:
        '''Calculates the IOF for the current principal. Only the flat and the daily parts are rounded, to eight places.'''

        total = 0.0
        schedule = self.build_schedule(state.main_value, state.daily_rate, request)
        running = state.main_value
        amount = schedule.amount

        for x in schedule.entries:
            fee = running * ((1.0 + state.daily_rate) ** x.business_diff - 1.0)
            without_fee = amount - fee

            main_iof = _round(without_fee * request.iof_overall, 8)
            daily_iof = _round(without_fee * min(x.accumulated_days, _IOF_DAYS_CAP) * request.iof_percentage, 8)

            total += main_iof + daily_iof
            running = running + fee - amount

        return total

    def calculate_installment(self, request: ContractRequest) -> PlanEntry:
        requested = request.requested_amount
        disbursement_date = get_schedule_days(request, self.is_bizz_day_cb)[0].anchor

        # 1. Converge.
        kwa: t.Dict[str, t.Any] = {}

        kwa['passes'] = self._PASSES
        kwa['build_cb'] = lambda s: self.build_schedule(s.main_value, s.daily_rate, request)
        kwa['iof_cb'] = lambda s, _: self.calculate_iof(s, request)

        res = converge(request, ConvergenceState(main_value=requested, daily_rate=self.get_daily_rate(request)), **kwa)

        total_iof = res.total_iof
        schedule = res.schedule
        installment_amount = schedule.amount
        total_amount = installment_amount * request.installments
        amounts = calculate_amounts(request, total_amount, total_iof)

        # 2. Rates.
        rates = self._get_rates(
            request,
            disbursement_date,
            schedule.due_dates,
            amounts.calculation_basis_for_effective_interest_rate,
            amounts.customer_amount,
            amounts.customer_debit_service_proportion
        )

        return PlanEntry(
            installment=request.installments,
            due_date=schedule.last.due_date,
            disbursement_date=disbursement_date,
            accumulated_days=schedule.last.accumulated_days,
            accumulated_business_days=schedule.last.accumulated_business_days,
            days_index=schedule.last.factor,
            accumulated_days_index=schedule.last.accumulated_factor,
            interest_rate=request.interest_rate,
            installment_amount=installment_amount,
            total_amount=total_amount,
            debit_service=amounts.debit_service,
            customer_debit_service_amount=amounts.customer_debit_service_amount,
            customer_amount=amounts.customer_amount,
            calculation_basis_for_effective_interest_rate=amounts.calculation_basis_for_effective_interest_rate,
            merchant_debit_service_amount=amounts.merchant_debit_service_amount,
            merchant_total_amount=amounts.merchant_total_amount,
            settled_to_merchant=amounts.settled_to_merchant,
            mdr_amount=amounts.mdr_amount,
            effective_interest_rate=rates.eir_monthly,
            total_effective_cost=rates.tec_monthly,
            eir_monthly=rates.eir_monthly,
            eir_yearly=rates.eir_yearly,
            tec_monthly=rates.tec_monthly,
            tec_yearly=rates.tec_yearly,
            total_iof=total_iof,
            contract_amount=requested + total_iof,
            tac_amount=amounts.tac_amount,
            iof_percentage=request.iof_percentage,
            overall_iof=request.iof_overall
        )

# Strategies, by name.
_PROVIDERS: t.Dict[str, t.Type[PaymentPlan]] = {
    'BMP': BMP,
    'Iterative': Iterative,
    'QiTech': QiTech
}

@typeguard.typechecked
def get_provider(provider: _PROVIDER = 'Iterative', is_bizz_day_cb: t.Callable[[datetime.date], bool] = is_business_day) -> PaymentPlan:
    '''Returns a calculation strategy by name.'''

    return _PROVIDERS[provider](is_bizz_day_cb)

@typeguard.typechecked
def calculate_payment_plan(
    request: ContractRequest,
    provider: _PROVIDER = 'Iterative',
    is_bizz_day_cb: t.Callable[[datetime.date], bool] = is_business_day
) -> t.List[PlanEntry]:
    '''
    Calculates the payment plan of a contract.

    Returns one entry per installment count, from one up to "request.installments", or up to the count where the
    sweep stops. The sweep stops when the installment falls below "request.min_installment_amount", or the total
    amount exceeds "request.max_total_amount". The entry for one installment is always returned.

    Raises "InvalidRequestedAmount" if the requested amount is not positive, "InvalidNumberOfInstallments" if the
    installment count is not positive, and "RateSolverFailure" if the EIR or the TEC can't be solved.

    >>> plan = calculate_payment_plan(ContractRequest(1000.0, datetime.date(2022, 2, 1), datetime.date(2022, 1, 1), 3, interest_rate=0.03), 'BMP')
    >>> [x.installment for x in plan]
    [1, 2, 3]
    '''

    return get_provider(provider, is_bizz_day_cb).calculate_payment_plan(request)

@typeguard.typechecked
def calculate_down_payment_plan(
    request: DownPaymentRequest,
    provider: _PROVIDER = 'Iterative',
    is_bizz_day_cb: t.Callable[[datetime.date], bool] = is_business_day
) -> t.List[DownPaymentEntry]:
    '''
    Calculates a down payment plan.

    Returns one entry per down payment installment count, each with the full payment plan of the main contract that
    follows it. See "PaymentPlan.calculate_down_payment_plan".
    '''

    return get_provider(provider, is_bizz_day_cb).calculate_down_payment_plan(request)
# }}}

# Log current version info.
_LOG.info(f'Payment plan version {__version__} initialized')

if __name__ == '__main__':
    import doctest

    doctest.testmod()

# vi:fdm=marker:
