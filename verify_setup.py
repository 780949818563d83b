"""
Setup verification script for a running storefront API

Checks:
1. Health endpoint
2. Admin login (JWT)
3. Admin dashboard
4. Product listing and detail
5. Categories

Each request is timed and a short report is printed at the end.

Usage:
    python verify_setup.py [--base-url http://localhost:8000/api] [--email ...] [--password ...]
"""
import argparse
import getpass
import os
import sys
import time
from datetime import datetime

import requests
from dotenv import load_dotenv

load_dotenv()

DEFAULT_BASE_URL = os.environ.get('STOREFRONT_API_URL', 'http://localhost:8000/api')
DEFAULT_ADMIN_EMAIL = os.environ.get('STOREFRONT_ADMIN_EMAIL', 'admin@bbn-nutrition.com')


class SetupVerifier:
    """Runs timed requests against the API and collects the results"""

    def __init__(self, base_url, timeout=15):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.results = []

    def request(self, name, method, endpoint, expected_status=200, **kwargs):
        url = f"{self.base_url}{endpoint}"
        result = {'name': name, 'endpoint': endpoint, 'status_code': 0, 'response_time_ms': 0, 'success': False}

        start = time.time()
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            result['error'] = str(e)
            self.results.append(result)
            return result, None
        result['response_time_ms'] = round((time.time() - start) * 1000, 2)
        result['status_code'] = response.status_code
        result['success'] = response.status_code == expected_status

        try:
            body = response.json()
        except ValueError:
            body = None
            result['error'] = response.text[:200]

        if isinstance(body, dict):
            data = body.get('data')
            if isinstance(data, list):
                result['item_count'] = len(data)
            if not result['success']:
                result['error'] = body.get('message', '')

        self.results.append(result)
        return result, body

    def print_result(self, result):
        icon = "✅" if result['success'] else "❌"
        print(f"{icon} {result['name']}")
        print(f"   {result['endpoint']} -> {result['status_code']} in {result['response_time_ms']}ms")
        if result.get('item_count') is not None:
            print(f"   Items: {result['item_count']}")
        if not result['success'] and result.get('error'):
            print(f"   Error: {result['error'][:200]}")

    def check(self, name, method, endpoint, **kwargs):
        result, body = self.request(name, method, endpoint, **kwargs)
        self.print_result(result)
        return body if result['success'] else None

    def login(self, email, password):
        body = self.check('Auth - Admin login', 'POST', '/auth/login/', json={'email': email, 'password': password})
        if not body:
            return False
        self.session.headers.update({'Authorization': f"Bearer {body['token']}"})
        return True

    def report(self):
        total = len(self.results)
        passed = sum(1 for r in self.results if r['success'])
        timed = [r for r in self.results if r['success']]
        average = sum(r['response_time_ms'] for r in timed) / len(timed) if timed else 0

        print("\n" + "=" * 60)
        print("📊 SETUP VERIFICATION REPORT")
        print("=" * 60)
        print(f"Base URL: {self.base_url}")
        print(f"Date: {datetime.now():%Y-%m-%d %H:%M:%S}")
        print(f"Checks passed: {passed}/{total}")
        print(f"Average response time: {average:.2f}ms")
        if timed:
            slowest = max(timed, key=lambda r: r['response_time_ms'])
            print(f"Slowest: {slowest['name']} ({slowest['response_time_ms']}ms)")
        print("=" * 60)
        return passed == total


def main():
    parser = argparse.ArgumentParser(description='Smoke test a running BBN Nutrition API')
    parser.add_argument('--base-url', default=DEFAULT_BASE_URL)
    parser.add_argument('--email', default=DEFAULT_ADMIN_EMAIL)
    parser.add_argument('--password', default=os.environ.get('STOREFRONT_ADMIN_PASSWORD'))
    args = parser.parse_args()

    password = args.password or getpass.getpass(f"Password for {args.email}: ")
    verifier = SetupVerifier(args.base_url)

    print("=" * 60)
    print("🧪 BBN NUTRITION API SETUP CHECK")
    print("=" * 60)

    if not verifier.check('Health - API status', 'GET', '/health/'):
        print("\n❌ API is not reachable. Is the server running?")
        verifier.report()
        sys.exit(1)

    if verifier.login(args.email, password):
        verifier.check('Admin - Dashboard', 'GET', '/admin/dashboard/')
        verifier.check('Admin - Product analytics', 'GET', '/admin/products/analytics/')
    else:
        print("   Run `python manage.py fix_admin_user` to create or repair the admin account.")

    products = verifier.check('Products - First page', 'GET', '/products/', params={'page': 1, 'limit': 12})
    if products and products.get('data'):
        product_id = products['data'][0]['id']
        verifier.check('Products - Detail', 'GET', f'/products/{product_id}/')
    verifier.check('Products - Featured', 'GET', '/products/', params={'featured': 'true'})
    verifier.check('Categories - List', 'GET', '/categories/')

    sys.exit(0 if verifier.report() else 1)


if __name__ == "__main__":
    main()
