#!/usr/bin/env python
"""
Test runner script for the full suite
Usage: python Doc/run_tests.py [app ...]
"""
import os
import sys

import django
from django.conf import settings
from django.test.utils import get_runner

APPS = [
    'ori.core',
    'ori.catalog',
    'ori.inventory',
    'ori.crm',
    'ori.sales',
    'ori.purchasing',
    'ori.logistics',
    'ori.billing',
    'ori.tasks',
    'ori.prospecting',
    'ori.communication',
    'ori.reports',
]

if __name__ == "__main__":
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    labels = sys.argv[1:] or APPS
    # settings pick the dummy cache and locmem mail backend when 'test' is in argv
    sys.argv.append('test')
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'ori.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    failures = test_runner.run_tests(labels)
    sys.exit(bool(failures))
