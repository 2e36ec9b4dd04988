#   Licensed under the Apache License, Version 2.0 (the "License"); you may
#   not use this file except in compliance with the License. You may obtain
#   a copy of the License at
#
#        http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
#   WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
#   License for the specific language governing permissions and limitations
#   under the License.
#

from cliff import command
from cliff import lister

import cfdock

from cfdock import runner
from cfdock.utils import common
from cfdock import workspace


def add_settings_arguments(parser):
    parser.add_argument(
        '--workspace',
        metavar='<dir>',
        dest='workspace',
        default=None,
        help=('Directory holding deployment checkouts, state and '
              'credentials. Defaults to $CFDOCK_WORKSPACE or ./workspace'),
    )
    parser.add_argument(
        '--config-file',
        metavar='<file>',
        dest='config_file',
        default=None,
        help=('YAML file overriding the default deployment settings'),
    )
    parser.add_argument(
        '--host-ip',
        metavar='<ip>',
        dest='host_ip',
        default=None,
        help=('Host IP the system domain resolves to. Defaults to $HOST_IP '
              'or the detected host address'),
    )
    parser.add_argument(
        '--system-domain',
        metavar='<domain>',
        dest='system_domain',
        default=None,
        help=('Cloud Foundry system domain. Defaults to $SYSTEM_DOMAIN or '
              '<host-ip>.nip.io'),
    )
    return parser


def confirm(prompt, assume_yes=False):
    if assume_yes:
        return True
    return input('%s (yes/no): ' % prompt).strip() == 'yes'


class CommandMixin(object):
    '''Logging, settings and exit code handling shared by all commands.'''

    log = None
    log_file = None
    log_level = None

    def get_parser(self, prog_name):
        parser = super(CommandMixin, self).get_parser(prog_name)
        return add_settings_arguments(parser)

    def settings(self, parsed_args):
        return common.load_settings(
            config_file=parsed_args.config_file,
            workspace=parsed_args.workspace,
            host_ip=parsed_args.host_ip,
            system_domain=parsed_args.system_domain)

    def run(self, parsed_args):
        (self.log, self.log_file, self.log_level) = \
            common.configure_logging_from_args(__name__, self.app_args)
        try:
            return super(CommandMixin, self).run(parsed_args)
        except runner.CommandError as e:
            # external tools decide the exit status
            self.log.error(e)
            return e.returncode

    def write(self, text):
        self.app.stdout.write(text)
        if not text.endswith('\n'):
            self.app.stdout.write('\n')


class Full(CommandMixin, command.Command):
    """Deploy the BOSH director and Cloud Foundry"""

    def take_action(self, parsed_args):
        self.write(cfdock.full(self.settings(parsed_args),
                               log_level=self.log_level,
                               log_file=self.log_file))


class Director(CommandMixin, command.Command):
    """Deploy the BOSH director only"""

    def take_action(self, parsed_args):
        cfdock.director(self.settings(parsed_args),
                        log_level=self.log_level,
                        log_file=self.log_file)


class Cf(CommandMixin, command.Command):
    """Deploy Cloud Foundry on an existing director"""

    def take_action(self, parsed_args):
        self.write(cfdock.cf(self.settings(parsed_args),
                             log_level=self.log_level,
                             log_file=self.log_file))


class Destroy(CommandMixin, command.Command):
    """Tear down Cloud Foundry, the director and the Docker network"""

    def get_parser(self, prog_name):
        parser = super(Destroy, self).get_parser(prog_name)
        parser.add_argument(
            '--yes',
            dest='yes',
            action='store_true',
            default=False,
            help=('Do not ask for confirmation'),
        )
        return parser

    def take_action(self, parsed_args):
        self.log.warning('This will destroy the BOSH Director and all '
                         'deployments!')
        if not confirm('Are you sure?', parsed_args.yes):
            self.log.warning('Aborted.')
            return 0
        cfdock.destroy(self.settings(parsed_args),
                       log_level=self.log_level,
                       log_file=self.log_file)


class Status(CommandMixin, lister.Lister):
    """Show deployment status"""

    def take_action(self, parsed_args):
        rows = cfdock.status(self.settings(parsed_args),
                             log_level=self.log_level,
                             log_file=self.log_file)
        return ('component', 'name', 'state'), rows


class Info(CommandMixin, command.Command):
    """Show Cloud Foundry connection info"""

    def take_action(self, parsed_args):
        self.write(cfdock.info(self.settings(parsed_args),
                               log_level=self.log_level,
                               log_file=self.log_file))


class Env(CommandMixin, command.Command):
    """Print the director environment as shell exports"""

    def take_action(self, parsed_args):
        self.write(workspace.export_lines(
            cfdock.env(self.settings(parsed_args))))


class CredhubEnv(CommandMixin, command.Command):
    """Print CredHub client settings as shell exports"""

    def take_action(self, parsed_args):
        self.write(workspace.export_lines(
            cfdock.credhub_env(self.settings(parsed_args),
                               log_level=self.log_level,
                               log_file=self.log_file)))
        self.log.info('CredHub environment configured. Run: credhub login')


class Password(CommandMixin, command.Command):
    """Show the Cloud Foundry or director admin password"""

    def get_parser(self, prog_name):
        parser = super(Password, self).get_parser(prog_name)
        parser.add_argument(
            'kind',
            metavar='<kind>',
            nargs='?',
            default='cf',
            choices=['cf', 'director'],
            help=('Whose admin password to show: cf or director'),
        )
        return parser

    def take_action(self, parsed_args):
        self.write(cfdock.password(self.settings(parsed_args),
                                   parsed_args.kind) or 'Not found')


class Login(CommandMixin, command.Command):
    """Log in to Cloud Foundry as admin"""

    def take_action(self, parsed_args):
        cfdock.login(self.settings(parsed_args),
                     log_level=self.log_level,
                     log_file=self.log_file)


class SetupSpace(CommandMixin, command.Command):
    """Create an org and space and target them"""

    def get_parser(self, prog_name):
        parser = super(SetupSpace, self).get_parser(prog_name)
        parser.add_argument(
            '--org',
            metavar='<org>',
            dest='org',
            default='dev-org',
            help=('Org to create and target'),
        )
        parser.add_argument(
            '--space',
            metavar='<space>',
            dest='space',
            default='dev',
            help=('Space to create and target'),
        )
        return parser

    def take_action(self, parsed_args):
        cfdock.setup_space(self.settings(parsed_args),
                           org=parsed_args.org,
                           space=parsed_args.space,
                           log_level=self.log_level,
                           log_file=self.log_file)


class Vms(CommandMixin, command.Command):
    """List the director VMs"""

    def get_parser(self, prog_name):
        parser = super(Vms, self).get_parser(prog_name)
        parser.add_argument(
            '--vitals',
            dest='vitals',
            action='store_true',
            default=False,
            help=('Include VM vitals'),
        )
        return parser

    def take_action(self, parsed_args):
        return cfdock.vms(self.settings(parsed_args),
                          vitals=parsed_args.vitals,
                          log_level=self.log_level,
                          log_file=self.log_file)


class InstanceCommand(CommandMixin, command.Command):

    def get_parser(self, prog_name):
        parser = super(InstanceCommand, self).get_parser(prog_name)
        parser.add_argument(
            'instance',
            metavar='<instance>',
            nargs='?',
            help=('Platform instance, e.g. router/0'),
        )
        return parser

    def take_action(self, parsed_args):
        settings = self.settings(parsed_args)
        if not parsed_args.instance:
            self.write('Usage: %s <instance>\nExample: %s router/0' %
                       (self.cmd_name, self.cmd_name))
            cfdock.vms(settings, deployment=True,
                       log_level=self.log_level, log_file=self.log_file)
            return 1
        return self.instance_action(settings, parsed_args.instance)


class Ssh(InstanceCommand):
    """SSH into a platform VM"""

    def instance_action(self, settings, instance):
        return cfdock.ssh(settings, instance,
                          log_level=self.log_level, log_file=self.log_file)


class Logs(InstanceCommand):
    """Follow the logs of a platform VM"""

    def instance_action(self, settings, instance):
        return cfdock.logs(settings, instance,
                           log_level=self.log_level, log_file=self.log_file)


class Tasks(CommandMixin, command.Command):
    """Show recent director tasks"""

    def get_parser(self, prog_name):
        parser = super(Tasks, self).get_parser(prog_name)
        parser.add_argument(
            '--recent',
            metavar='<count>',
            dest='recent',
            type=int,
            default=10,
            help=('Number of tasks to show'),
        )
        return parser

    def take_action(self, parsed_args):
        return cfdock.tasks(self.settings(parsed_args),
                            recent=parsed_args.recent,
                            log_level=self.log_level,
                            log_file=self.log_file)


class CancelTask(CommandMixin, command.Command):
    """Cancel a running director task"""

    def get_parser(self, prog_name):
        parser = super(CancelTask, self).get_parser(prog_name)
        parser.add_argument(
            'task_id',
            metavar='<task_id>',
            nargs='?',
            help=('Task to cancel'),
        )
        return parser

    def take_action(self, parsed_args):
        settings = self.settings(parsed_args)
        if not parsed_args.task_id:
            self.write('Usage: %s <task_id>' % self.cmd_name)
            cfdock.tasks(settings, log_level=self.log_level,
                         log_file=self.log_file)
            return 1
        return cfdock.cancel_task(settings, parsed_args.task_id,
                                  log_level=self.log_level,
                                  log_file=self.log_file)


class Recreate(CommandMixin, command.Command):
    """Recreate all Cloud Foundry VMs"""

    def get_parser(self, prog_name):
        parser = super(Recreate, self).get_parser(prog_name)
        parser.add_argument(
            '--yes',
            dest='yes',
            action='store_true',
            default=False,
            help=('Do not ask for confirmation'),
        )
        return parser

    def take_action(self, parsed_args):
        if not confirm('This will recreate all CF VMs. Continue?',
                       parsed_args.yes):
            self.log.warning('Aborted.')
            return 0
        return cfdock.recreate(self.settings(parsed_args),
                               log_level=self.log_level,
                               log_file=self.log_file)


class Containers(CommandMixin, command.Command):
    """List Docker containers on the platform network"""

    def take_action(self, parsed_args):
        return cfdock.containers(self.settings(parsed_args),
                                 log_level=self.log_level,
                                 log_file=self.log_file)


class Prune(CommandMixin, command.Command):
    """Remove stopped containers, unused images and volumes"""

    def take_action(self, parsed_args):
        cfdock.prune(self.settings(parsed_args),
                     log_level=self.log_level,
                     log_file=self.log_file)
