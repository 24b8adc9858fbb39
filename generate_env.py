#!/usr/bin/env python3
"""
Writes the .env file read by app.py

Generates the Flask SECRET_KEY, the system/admin/demo user passwords and the
send-asset-email bearer secret, and lays out every setting the application
reads with its default.

Usage:
    python generate_env.py              # prompt before overwriting an existing .env
    python generate_env.py --force      # overwrite (a timestamped backup is kept)
    python generate_env.py --dev        # predictable values and HTTP-friendly cookies
"""

import argparse
import os
import secrets
import shutil
import string
import sys
from datetime import datetime
from pathlib import Path

ENV_FILE = Path(__file__).parent / '.env'

# Safe inside a double-quoted .env value
PASSWORD_SYMBOLS = "!@$%^&*()_+-[]{}|;.,<>?"

DEV_SECRET_KEY = "dev-secret-key-DO-NOT-USE-IN-PRODUCTION"
DEV_PASSWORD = "admin987654321!"


class EnvGenerator:

    def __init__(self, dev_mode=False, env_file=ENV_FILE):
        self.dev_mode = dev_mode
        self.env_file = Path(env_file)

    def secret(self, nbytes=64):
        return DEV_SECRET_KEY if self.dev_mode else secrets.token_hex(nbytes)

    def password(self, length=20):
        """Random password with at least one lower, upper, digit and symbol"""
        if self.dev_mode:
            return DEV_PASSWORD
        pools = (string.ascii_lowercase, string.ascii_uppercase, string.digits, PASSWORD_SYMBOLS)
        chars = [secrets.choice(pool) for pool in pools]
        alphabet = ''.join(pools)
        chars += [secrets.choice(alphabet) for _ in range(length - len(chars))]
        secrets.SystemRandom().shuffle(chars)
        return ''.join(chars)

    def values(self):
        secure = 'False' if self.dev_mode else 'True'
        return {
            'secret_key': self.secret(),
            'function_secret': self.secret(32),
            'system_password': self.password(),
            'admin_password': self.password(),
            'demo_password': self.password(),
            'database_url': 'sqlite:///instance/itam.db',
            'secure': secure,
        }

    def sections(self, v):
        """(title, [(comment, line), ...]) in file order"""
        return [
            ('Flask', [
                ('Session signing and CSRF key', f"SECRET_KEY={v['secret_key']}"),
                ('Never True in production', 'FLASK_DEBUG=False'),
                (None, 'USE_RELOADER=False'),
                ('127.0.0.1 behind a reverse proxy, 0.0.0.0 for all interfaces', 'FLASK_HOST=127.0.0.1'),
                (None, 'FLASK_PORT=5000'),
            ]),
            ('Database', [
                ('SQLite by default; any SQLAlchemy URL works (postgresql://user:pw@host/db)',
                 f"DATABASE_URL={v['database_url']}"),
            ]),
            ('Users created by app.py on first run', [
                ('Internal user for automated operations', f'SYSTEM_USER_PASSWORD="{v["system_password"]}"'),
                ('Administrator (username: admin)', f'ADMIN_USER_PASSWORD="{v["admin_password"]}"'),
                ('Demo users jdoe / asmith; falls back to ADMIN_USER_PASSWORD',
                 f'DEMO_USER_PASSWORD="{v["demo_password"]}"'),
            ]),
            ('HTTPS and cookies (set False only for plain-HTTP development)', [
                (None, f"ENABLE_HTTPS={v['secure']}"),
                ('Needs ENABLE_HTTPS=True', f"FORCE_HTTPS_REDIRECT={v['secure']}"),
                (None, f"SESSION_COOKIE_SECURE={v['secure']}"),
                (None, f"REMEMBER_COOKIE_SECURE={v['secure']}"),
                ('Seconds', 'PERMANENT_SESSION_LIFETIME=3600'),
                ('Seconds', 'REMEMBER_COOKIE_DURATION=86400'),
            ]),
            ('Object storage', [
                ('Folder holding the asset-photos and asset-documents buckets', 'STORAGE_ROOT=instance/storage'),
            ]),
            ('Email (send-asset-email function)', [
                ("Empty calls this application's own /functions/send-asset-email", 'EMAIL_FUNCTION_URL='),
                ('Bearer secret required from callers', f"EMAIL_FUNCTION_SECRET={v['function_secret']}"),
                ('Seconds', 'EMAIL_FUNCTION_TIMEOUT=20'),
                ("'log' writes mails to the log, 'graph' sends through Microsoft Graph", 'EMAIL_TRANSPORT=log'),
                ('Graph credentials, used when none are saved for the tenant', '# AZURE_TENANT_ID='),
                (None, '# AZURE_CLIENT_ID='),
                (None, '# AZURE_CLIENT_SECRET='),
                (None, '# AZURE_SENDER_EMAIL='),
            ]),
            ('Logging', [
                ('itam.log and errors.log are written here', 'LOG_DIR=logs'),
                ('Console level', 'LOG_LEVEL=DEBUG'),
            ]),
        ]

    def render(self, v):
        rule = '# ' + '=' * 76
        lines = [
            '# IT Asset Management environment',
            f"# Generated {datetime.now():%Y-%m-%d %H:%M:%S}",
            '# Keep this file out of version control.',
        ]
        for title, entries in self.sections(v):
            lines += ['', rule, f'# {title}', rule]
            for comment, line in entries:
                if comment:
                    lines.append(f'# {comment}')
                lines.append(line)
        return '\n'.join(lines) + '\n'

    def backup(self):
        stamp = datetime.now().strftime('%Y-%m-%d_%H-%M-%S')
        target = self.env_file.with_name(f'.env.backup.{stamp}')
        shutil.copy2(self.env_file, target)
        return target

    def write(self, content):
        self.env_file.write_text(content)
        os.chmod(self.env_file, 0o600)

    def generate(self, force=False):
        if self.env_file.exists():
            if not force:
                answer = input(f"{self.env_file} already exists. Overwrite? (yes/no): ").strip().lower()
                if answer not in ('yes', 'y'):
                    print("Aborted, existing .env left unchanged.")
                    return False
            print(f"Backup written to {self.backup()}")

        v = self.values()
        self.write(self.render(v))
        print(f"Created {self.env_file}")
        self.report(v)
        return True

    def report(self, v):
        print("\n" + "=" * 70)
        print("🔐 Credentials (shown once, store them in a password manager)")
        print("=" * 70)
        print(f"  admin          {v['admin_password']}")
        print(f"  system         {v['system_password']}")
        print(f"  jdoe, asmith   {v['demo_password']}")
        print(f"  database       {v['database_url']}")
        print("\nNext: python app.py, log in as admin and change the password.")
        if self.dev_mode:
            print("\n⚠️  Dev mode: predictable secrets and insecure cookies. Never deploy this file.")
        print()


def main():
    parser = argparse.ArgumentParser(description='Generate the .env file for IT Asset Management')
    parser.add_argument('--force', '-f', action='store_true', help='Overwrite an existing .env without prompting')
    parser.add_argument('--dev', '-d', action='store_true',
                        help='Predictable values for local development (NOT FOR PRODUCTION)')
    args = parser.parse_args()

    ok = EnvGenerator(dev_mode=args.dev).generate(force=args.force)
    sys.exit(0 if ok else 1)


if __name__ == '__main__':
    main()
