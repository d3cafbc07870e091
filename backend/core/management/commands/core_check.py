import sys
import json
from django.core.management.base import BaseCommand
from django.utils import timezone
from django.conf import settings

from core.views import run_checks


class Command(BaseCommand):
    help = "Run internal health checks (DB, cache, Celery) and print a summary for CI/CD pipelines."

    def add_arguments(self, parser):
        parser.add_argument("--db", action="store_true", help="Check database connectivity")
        parser.add_argument("--cache", action="store_true", help="Check cache connectivity")
        parser.add_argument("--celery", action="store_true", help="Check Celery connectivity (runs core.tasks.ping)")
        parser.add_argument("--json", action="store_true", help="Output as JSON (default is pretty text)")

    def handle(self, *args, **opts):
        names = [n for n in ("db", "cache", "celery") if opts.get(n)]
        ok, checks = run_checks(names)

        results = {
            "time": timezone.now().isoformat(),
            "env": getattr(settings, "ENV", "dev"),
            "debug": bool(settings.DEBUG),
            "ok": ok,
            "checks": checks,
        }

        if opts.get("json"):
            self.stdout.write(json.dumps(results, indent=2))
        else:
            self.stdout.write(f"\n=== Service Desk Health Check ({results['time']}) ===\n")
            self.stdout.write(f"Environment: {results['env']} | Debug={results['debug']}\n\n")
            for key, val in checks.items():
                mark = "OK  " if val.get("ok") else "FAIL"
                err = f" ({val.get('error')})" if not val.get("ok") and val.get("error") else ""
                self.stdout.write(f" [{mark}] {key.upper()}{err}\n")
            self.stdout.write(f"\nOverall: {'OK' if ok else 'FAILED'}\n")

        # Exit with code 1 on failure (for CI)
        if not ok:
            sys.exit(1)
