import io
import os
import shutil
import tempfile
import unittest
from unittest import mock

from seqwrangle.cli import main, create_parser
from seqwrangle.models.config import SeqwrangleConfig, ConfigError

def run_cli(*args):
    with mock.patch('sys.argv', ['seqwrangle', '--quiet'] + list(args)):
        return main()

class TestCli(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def path(self, name, content=None):
        path = os.path.join(self.tmpdir, name)
        if content is not None:
            with open(path, 'w') as f:
                f.write(content)
        return path

    def read(self, name):
        with open(self.path(name)) as f:
            return f.read()

    def test_select_columns(self):
        alignment = self.path('aln.fasta', ">s1\nACGT\n>s2\nA-GA\n")
        self.assertEqual(run_cli('select-columns', alignment, '--columns', '0,2', '-o', self.path('out.fasta')), 0)
        self.assertEqual(self.read('out.fasta'), ">s1\nAG\n>s2\nAG\n")

    def test_select_columns_out_of_range(self):
        alignment = self.path('aln.fasta', ">s1\nACGT\n")
        self.assertEqual(run_cli('select-columns', alignment, '-c', '9', '-o', self.path('out.fasta')), 1)

    def test_select_columns_malformed_fasta(self):
        alignment = self.path('aln.fasta', ">s1\nACGT\n")
        with mock.patch('seqwrangle.io.parsers.SeqIO.parse', side_effect=ValueError('truncated record')):
            with self.assertLogs('seqwrangle', level='ERROR') as logs:
                code = run_cli('select-columns', alignment, '-c', '0', '-o', self.path('out.fasta'))
        self.assertEqual(code, 1)
        self.assertIn('Error parsing FASTA file', logs.output[0])
        self.assertNotIn('Unexpected error', logs.output[0])

    def test_concat_with_partitions(self):
        a = self.path('a.fasta', ">x\nAAAA\n>y\nCCCC\n")
        b = self.path('b.fasta', ">y\nGG\n>z\nTT\n")
        code = run_cli('concat', a, b, '-o', self.path('cat.fasta'), '--partitions', self.path('part.txt'))
        self.assertEqual(code, 0)
        self.assertEqual(self.read('cat.fasta'), ">x\nAAAA--\n>y\nCCCCGG\n>z\n----TT\n")
        self.assertEqual(self.read('part.txt'), "DNA, a.fasta=1-4\nDNA, b.fasta=5-6\n")

    def test_concat_pattern_failure(self):
        a = self.path('a.fasta', ">x_1\nAAAA\n")
        b = self.path('b.fasta', ">y\nGG\n")
        code = run_cli('concat', a, b, '--id-mode', 'prefix', '--id-pattern', r'(\w+)_\d', '-o', self.path('cat.fasta'))
        self.assertEqual(code, 1)

    def taxdump(self):
        taxdump = os.path.join(self.tmpdir, 'taxdump')
        os.mkdir(taxdump)
        with open(os.path.join(taxdump, 'nodes.dmp'), 'w') as f:
            f.write("1\t|\t1\t|\tno rank\t|\n2\t|\t1\t|\tsuperkingdom\t|\n561\t|\t2\t|\tgenus\t|\n562\t|\t561\t|\tspecies\t|\n")
        with open(os.path.join(taxdump, 'names.dmp'), 'w') as f:
            f.write("1\t|\troot\t|\t\t|\tscientific name\t|\n"
                    "2\t|\tBacteria\t|\t\t|\tscientific name\t|\n"
                    "561\t|\tEscherichia\t|\t\t|\tscientific name\t|\n"
                    "562\t|\tEscherichia coli\t|\t\t|\tscientific name\t|\n")
        return taxdump

    def test_lineage(self):
        taxdump = self.taxdump()
        table = self.path('hits.tsv', "read\ttaxid\nr1\t562\nr2\t1\n")

        code = run_cli('lineage', table, '--taxdump', taxdump, '--ranks', 'd,g,s', '-o', self.path('out.tsv'))
        self.assertEqual(code, 0)
        self.assertEqual(self.read('out.tsv'),
                         "read\ttaxid\tsuperkingdom\tgenus\tspecies\n"
                         "r1\t562\tBacteria\tEscherichia\tEscherichia coli\n"
                         "r2\t1\tNA\tNA\tNA\n")

    def test_lineage_report_ids(self):
        taxdump = self.taxdump()
        table = self.path('hits.tsv', "read\ttaxid\nr1\t562\n")

        code = run_cli('lineage', table, '--taxdump', taxdump, '--ranks', 'd,s', '--report', 'id',
                       '-o', self.path('out.tsv'))
        self.assertEqual(code, 0)
        self.assertEqual(self.read('out.tsv'),
                         "read\ttaxid\tsuperkingdom_taxid\tspecies_taxid\n"
                         "r1\t562\t2\t562\n")

    def test_lineage_bad_rank(self):
        table = self.path('hits.tsv', "read\ttaxid\n")
        self.assertEqual(run_cli('lineage', table, '--taxdump', self.tmpdir, '--ranks', 'x'), 1)

    def test_extract_rrna_from_gff(self):
        contig = 'A' * 10 + 'C' * 5 + 'G' * 3 + 'T' * 7
        gff = self.path('rrna.gff', (
            "##gff-version 3\n"
            "ctg1.1\tbarrnap\trRNA\t1\t10\t0\t+\t.\tName=16S_rRNA\n"
            "ctg1.1\tbarrnap\trRNA\t16\t18\t0\t+\t.\tName=23S_rRNA\n"
            "##FASTA\n"
            f">ctg1.1\n{contig}\n"
        ))
        code = run_cli('extract-rrna', '--gff', gff, '--max-its-length', '5',
                       '-o', self.path('regions.fasta'), '--gff-out', self.path('out.gff'))
        self.assertEqual(code, 0)
        lines = self.read('regions.fasta').splitlines()
        self.assertEqual(lines, [
            '>ctg1_16S_1 ctg1.1:1-10(+) source=rrna.gff annotation=rrna.gff', 'A' * 10,
            '>ctg1_16S-23S-ITS_1 ctg1.1:11-15(+) source=rrna.gff annotation=rrna.gff', 'C' * 5,
            '>ctg1_23S_1 ctg1.1:16-18(+) source=rrna.gff annotation=rrna.gff', 'GGG',
        ])
        self.assertIn('ID=ctg1_16S-23S-ITS_1', self.read('out.gff'))

    @unittest.skipIf(os.name == 'nt', 'needs a POSIX shell')
    def test_extract_rrna_fasta_from_stdin(self):
        # Stand-in for barrnap that only annotates a real, non-empty FASTA path
        barrnap = self.path('barrnap', (
            "#!/bin/sh\n"
            "[ \"$1\" = \"--version\" ] && exit 0\n"
            "for last; do :; done\n"
            "grep -q \"^>ctg1\" \"$last\" || exit 1\n"
            "printf 'ctg1\\tbarrnap\\trRNA\\t1\\t4\\t0\\t+\\t.\\tName=16S_rRNA\\n'\n"
        ))
        os.chmod(barrnap, 0o755)

        with mock.patch('sys.stdin', io.StringIO(">ctg1\nACGTACGT\n")):
            code = run_cli('extract-rrna', '--fasta', '-', '--barrnap', barrnap,
                           '-o', self.path('regions.fasta'))
        self.assertEqual(code, 0)
        self.assertEqual(self.read('regions.fasta').splitlines(), [
            '>ctg1_16S_1 ctg1:1-4(+) source=stdin annotation=barrnap', 'ACGT',
        ])

    def test_extract_rrna_missing_annotator(self):
        fasta = self.path('genome.fa', ">ctg1\nACGT\n")
        code = run_cli('extract-rrna', '--fasta', fasta, '--barrnap', '/nonexistent/barrnap')
        self.assertEqual(code, 1)

class TestConfig(unittest.TestCase):

    def test_lineage_requires_taxdump(self):
        args = create_parser().parse_args(['lineage', 'hits.tsv'])
        with mock.patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ConfigError):
                SeqwrangleConfig(args)
        with mock.patch.dict(os.environ, {'SEQWRANGLE_TAXDUMP': '/data/taxdump'}):
            self.assertEqual(str(SeqwrangleConfig(args).taxdump), '/data/taxdump')

    def test_concat_pattern_required(self):
        args = create_parser().parse_args(['concat', 'a.fasta', '--id-mode', 'substitute'])
        with self.assertRaises(ConfigError):
            SeqwrangleConfig(args)

    def test_extract_needs_input(self):
        args = create_parser().parse_args(['extract-rrna'])
        with self.assertRaises(ConfigError):
            SeqwrangleConfig(args)

    def test_extract_types(self):
        args = create_parser().parse_args(['extract-rrna', '--gff', 'a.gff', '--types', '16S, 16S-23S-ITS'])
        self.assertEqual(SeqwrangleConfig(args).types, ['16S', '16S-23S-ITS'])

    def test_extract_unknown_types(self):
        args = create_parser().parse_args(['extract-rrna', '--gff', 'a.gff', '--types', '16S,5.8S'])
        with self.assertRaises(ConfigError) as cm:
            SeqwrangleConfig(args)
        self.assertIn('5.8S', str(cm.exception))

    def test_missing_required_argument_exits(self):
        with self.assertRaises(SystemExit):
            create_parser().parse_args(['select-columns', 'aln.fasta'])

if __name__ == '__main__':
    unittest.main()
