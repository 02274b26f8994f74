from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from attendance.aggregation import get_calendar_summary
from attendance.exceptions import TransientStoreError
from attendance.models import Team
from attendance.validation import validate_month_string


class Command(BaseCommand):
    help = "Print a team's events and daily attendance counts for one month"

    def add_arguments(self, parser):
        parser.add_argument('team', help='Team name')
        parser.add_argument(
            '--month',
            help='Month in YYYY-MM format (default: current month)',
        )

    def handle(self, *args, **options):
        try:
            team = Team.objects.get(name=options['team'])
        except Team.DoesNotExist:
            raise CommandError(f'Team "{options["team"]}" not found')

        if options['month']:
            is_valid, year, month, error_msg = validate_month_string(options['month'])
            if not is_valid:
                raise CommandError(error_msg)
        else:
            today = timezone.localdate()
            year, month = today.year, today.month

        try:
            summary = get_calendar_summary(team, year, month)
        except TransientStoreError as e:
            raise CommandError(str(e))

        total = summary['total_players']
        self.stdout.write(self.style.SUCCESS(f'{team.name}: {year}-{month:02d} ({total} players)'))

        if not summary['events']:
            self.stdout.write('  No events this month')
            return

        for event in summary['events']:
            attended = summary['counts'].get(event['event_date'], 0)
            start = event['start_time'] or '--:--'
            origin = ' (auto)' if event['is_auto_created'] else ''
            self.stdout.write(
                f"  {event['event_date']} {start}  {event['type']:<8} {attended}/{total}{origin}"
            )
