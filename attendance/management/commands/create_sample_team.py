from django.core.management.base import BaseCommand, CommandError
from django.contrib.auth.models import User
from django.conf import settings
from django.db import transaction
from attendance.models import Team, Profile


PLAYER_NAMES = [
    ('Alex', 'Johnson'),
    ('Maya', 'Patel'),
    ('James', 'Wilson'),
    ('Sophia', 'Garcia'),
    ('Tyler', 'Brown'),
    ('Emma', 'Davis'),
    ('Liam', 'Martinez'),
    ('Olivia', 'Taylor'),
    ('Chris', 'Anderson'),
    ('Jordan', 'Miller'),
    ('Riley', 'Young'),
    ('Quinn', 'Clark'),
]


class Command(BaseCommand):
    help = 'Create a sample team with one admin and a squad of players for trying out check-in'

    def add_arguments(self, parser):
        parser.add_argument(
            '--name',
            default='Sample FC',
            help='Team name (default: Sample FC)',
        )
        parser.add_argument(
            '--players',
            type=int,
            default=8,
            help=f'Number of players to create (1-{len(PLAYER_NAMES)}, default: 8)',
        )
        parser.add_argument(
            '--force',
            action='store_true',
            help='Force creation even in production (use with extreme caution)',
        )

    def handle(self, *args, **options):
        # Security check: prevent running in production unless forced
        if not settings.DEBUG and not options['force']:
            raise CommandError(
                'This command is disabled in production for security reasons.\n'
                'Sample accounts with simple passwords should not be created in production.\n'
                'If you really need to run this in production, use --force flag.'
            )

        player_count = options['players']
        if player_count < 1 or player_count > len(PLAYER_NAMES):
            raise CommandError(f'--players must be between 1 and {len(PLAYER_NAMES)}')

        name = options['name']
        if Team.objects.filter(name=name).exists():
            raise CommandError(f'Team "{name}" already exists')

        prefix = name.lower().replace(' ', '_')

        with transaction.atomic():
            team = Team.objects.create(name=name)

            admin = User.objects.create_user(
                username=f'{prefix}_admin',
                email=f'admin@{prefix}.example.com',
                password='admin123',
                first_name='Team',
                last_name='Admin',
            )
            admin.profile.role = Profile.Role.ADMIN
            admin.profile.team = team
            admin.profile.save()

            for first_name, last_name in PLAYER_NAMES[:player_count]:
                username = f'{prefix}_{first_name.lower()}_{last_name.lower()}'
                player = User.objects.create_user(
                    username=username,
                    email=f'{first_name.lower()}.{last_name.lower()}@{prefix}.example.com',
                    password='player123',
                    first_name=first_name,
                    last_name=last_name,
                )
                player.profile.role = Profile.Role.PLAYER
                player.profile.team = team
                player.profile.save()

        self.stdout.write(self.style.SUCCESS(f'Created team "{team.name}" with {player_count} players'))
        self.stdout.write(f'  Admin login: {admin.username} / admin123')
        self.stdout.write(f'  Player password: player123')
