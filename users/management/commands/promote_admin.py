from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

User = get_user_model()


class Command(BaseCommand):
    help = "Grant (or with --revoke, remove) organiser console access for a user by e-mail"

    def add_arguments(self, parser):
        parser.add_argument("email")
        parser.add_argument("--revoke", action="store_true")

    def handle(self, *args, **options):
        email = options["email"].strip().lower()
        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist:
            raise CommandError(f"User {email} not found")

        user.is_admin = not options["revoke"]
        user.save(update_fields=["is_admin"])

        verb = "Revoked admin from" if options["revoke"] else "Promoted"
        self.stdout.write(self.style.SUCCESS(f"{verb} {user.email}"))
