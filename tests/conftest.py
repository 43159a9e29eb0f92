# Copyright (C) Inco - All Rights Reserved.
#
# Written by the Inco credit team, October 2026.
#
# Unauthorized copying of this file, via any medium, is strictly prohibited. Proprietary and confidential.
#
# Refs
# ====
#
#  • http://docs.pytest.org/en/stable/how-to/fixtures.html
#  • http://docs.pytest.org/en/stable/how-to/mark.html
#

'''Conftest module.'''

# Core.
import datetime

# Libs.
import pytest

def pytest_configure(config):
    config.addinivalue_line('markers', 'smoke: mark test as smoke')
    config.addinivalue_line('markers', 'enigmatic: mark test as enigmatic')
    config.addinivalue_line('markers', 'limitation: test reveals an intentional limitation of the API')
    config.addinivalue_line('markers', 'slow: mark test as slow')

def _weekdays_only(date: datetime.date) -> bool:
    return date.weekday() < 5

@pytest.fixture
def weekdays():
    '''Business day predicate without holidays.'''

    return _weekdays_only
