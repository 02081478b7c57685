#!/usr/bin/env python3
"""
API Endpoint Testing Script

Smoke test of a running Disaster Alert deployment. Creates (or updates) a test
user, flips its alert status red and back to green, and records one SOS event.

Usage:
    python scripts/test_endpoints.py
    python scripts/test_endpoints.py --base-url http://your-server:3001
    python scripts/test_endpoints.py --phone 9999999999 --verbose
"""
import argparse
import sys

import httpx


class Colors:
    """ANSI color codes for terminal output"""
    GREEN = '\033[92m'
    RED = '\033[91m'
    YELLOW = '\033[93m'
    BLUE = '\033[94m'
    RESET = '\033[0m'


def log_success(msg):
    print(f"{Colors.GREEN}✓{Colors.RESET} {msg}")


def log_error(msg):
    print(f"{Colors.RED}✗{Colors.RESET} {msg}")


def log_info(msg):
    print(f"{Colors.BLUE}→{Colors.RESET} {msg}")


class APITester:
    def __init__(self, base_url: str, phone: str, verbose: bool = False):
        self.base_url = base_url.rstrip('/')
        self.phone = phone
        self.verbose = verbose
        self.results = {"passed": 0, "failed": 0}
        self.client = httpx.Client(base_url=self.base_url, timeout=30)

    def request(self, method: str, endpoint: str, **kwargs):
        """Make HTTP request and return response"""
        try:
            response = self.client.request(method, endpoint, **kwargs)
            if self.verbose:
                print(f"    Response [{response.status_code}]: {response.text[:200]}")
            return response
        except httpx.HTTPError as e:
            if self.verbose:
                print(f"    Request error: {e}")
            return None

    def test_endpoint(self, name: str, method: str, endpoint: str, expected_status=200, check=None, **kwargs):
        """Test a single endpoint, optionally checking the JSON body"""
        if self.verbose:
            log_info(f"Testing: {method.upper()} {endpoint}")

        response = self.request(method, endpoint, **kwargs)

        if response is None:
            log_error(f"{name}: Connection failed")
            self.results["failed"] += 1
            return False

        if isinstance(expected_status, (list, tuple)):
            status_ok = response.status_code in expected_status
        else:
            status_ok = response.status_code == expected_status

        if status_ok and check is not None and not check(response.json()):
            log_error(f"{name} - unexpected body: {response.text[:200]}")
            self.results["failed"] += 1
            return False

        if status_ok:
            log_success(f"{name} [{response.status_code}]")
            self.results["passed"] += 1
            return True

        log_error(f"{name} - Expected {expected_status}, got {response.status_code}")
        self.results["failed"] += 1
        return False

    def run_tests(self):
        """Run all endpoint tests"""
        alerts = f"/api/users/{self.phone}/alerts"

        print("\n" + "=" * 60)
        print("Disaster Alert API Endpoint Tests")
        print("=" * 60)
        print(f"Base URL: {self.base_url}")
        print(f"Test phone: {self.phone}")

        print("\n--- Health ---")
        self.test_endpoint("Health check", "GET", "/health",
            check=lambda body: body.get("status") == "OK")

        print("\n--- Users ---")
        self.test_endpoint("Create or update user", "POST", "/api/users",
            json={
                "phone": self.phone,
                "email": "smoke-test@example.com",
                "city": "Ludhiana",
                "locality": "Model Town",
                "fullAddress": "1 Test Street, Model Town, Ludhiana"
            })
        self.test_endpoint("Reject incomplete user", "POST", "/api/users",
            expected_status=400, json={"phone": self.phone})

        print("\n--- Alerts ---")
        self.test_endpoint("Get alert status", "GET", alerts,
            check=lambda body: body.get("alertStatus") in ("green", "red"))
        self.test_endpoint("Set alert red", "PUT", alerts, json={"alertStatus": "red"},
            check=lambda body: body.get("alertStatus") == "red")
        self.test_endpoint("Read back red", "GET", alerts,
            check=lambda body: body.get("alertStatus") == "red")
        self.test_endpoint("Reject invalid status", "PUT", alerts,
            expected_status=400, json={"alertStatus": "blue"})
        self.test_endpoint("Reset alert green", "PUT", alerts, json={"alertStatus": "green"})
        self.test_endpoint("Unknown user", "GET", "/api/users/0000000000-missing/alerts",
            expected_status=404)

        print("\n--- SOS ---")
        self.test_endpoint("Send SOS", "POST", "/api/sos",
            json={"phone": self.phone, "coordinates": [30.9, 75.85], "accuracy": 12},
            check=lambda body: body.get("coordinates") == "30.9, 75.85")
        self.test_endpoint("Reject bad coordinates", "POST", "/api/sos",
            expected_status=400, json={"phone": self.phone, "coordinates": ["a", "b"]})

        print("\n--- Places ---")
        self.test_endpoint("Nearby hospitals", "GET", "/api/places/nearby",
            expected_status=[200, 500],
            params={"lat": 30.9, "lng": 75.85, "type": "hospital"})
        self.test_endpoint("Missing place params", "GET", "/api/places/nearby",
            expected_status=400, params={"lat": 30.9})

        print("\n--- Assistant ---")
        self.test_endpoint("Assistant chat", "POST", "/api/assistant/chat",
            json={"message": "What should I do in an earthquake?"},
            check=lambda body: bool(body.get("reply")))

        print("\n" + "=" * 60)
        print("TEST SUMMARY")
        print("=" * 60)
        print(f"  {Colors.GREEN}Passed: {self.results['passed']}{Colors.RESET}")
        print(f"  {Colors.RED}Failed: {self.results['failed']}{Colors.RESET}")
        total = self.results['passed'] + self.results['failed']
        if total > 0:
            pct = (self.results['passed'] / total) * 100
            print(f"  Success Rate: {pct:.1f}%")
        print()

        return self.results['failed'] == 0


def main():
    parser = argparse.ArgumentParser(description="Test Disaster Alert API endpoints")
    parser.add_argument("--base-url", default="http://localhost:3001",
                       help="API base URL (default: http://localhost:3001)")
    parser.add_argument("--phone", default="1234567890",
                       help="Phone number used for the test user")
    parser.add_argument("--verbose", "-v", action="store_true",
                       help="Show detailed output")

    args = parser.parse_args()

    tester = APITester(args.base_url, args.phone, verbose=args.verbose)
    success = tester.run_tests()

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
