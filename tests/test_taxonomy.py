import io
import os
import shutil
import tempfile
import unittest

from seqwrangle.core.taxonomy import TaxonomyDB, LineageResolver, parse_ranks, annotate_table
from seqwrangle.core.utils import RANK_LADDER
from seqwrangle.models.errors import TaxonomyError

NODES = {
    '1': ('1', 'no rank'),
    '2': ('1', 'superkingdom'),
    '1224': ('2', 'phylum'),
    '1236': ('1224', 'class'),
    '91347': ('1236', 'order'),
    '543': ('91347', 'family'),
    '561': ('543', 'genus'),
    '562': ('561', 'species'),
    '83333': ('562', 'strain'),
}
NAMES = {
    '1': 'root',
    '2': 'Bacteria',
    '1224': 'Pseudomonadota',
    '1236': 'Gammaproteobacteria',
    '91347': 'Enterobacterales',
    '543': 'Enterobacteriaceae',
    '561': 'Escherichia',
    '562': 'Escherichia coli',
    '83333': 'Escherichia coli K-12',
}
DEFAULT = ['superkingdom', 'phylum', 'class', 'order', 'family', 'genus', 'species']
ECOLI = ['Bacteria', 'Pseudomonadota', 'Gammaproteobacteria', 'Enterobacterales',
         'Enterobacteriaceae', 'Escherichia', 'Escherichia coli']

class TestParseRanks(unittest.TestCase):

    def test_abbreviations(self):
        self.assertEqual(parse_ranks('d,p,c,o,f,g,s'), DEFAULT)
        self.assertEqual(parse_ranks('k'), ['kingdom'])

    def test_full_names(self):
        self.assertEqual(parse_ranks('genus, species group,subphylum'),
                         ['genus', 'species group', 'subphylum'])

    def test_range_towards_general_is_reversed_ladder(self):
        start = RANK_LADDER.index('kingdom')
        stop = RANK_LADDER.index('order')
        self.assertEqual(parse_ranks('o-k'), list(reversed(RANK_LADDER[start:stop + 1])))

    def test_range_towards_specific(self):
        self.assertEqual(parse_ranks('g-s'),
                         ['genus', 'subgenus', 'species group', 'species subgroup', 'species'])
        self.assertEqual(parse_ranks('family-family'), ['family'])

    def test_unknown_rank(self):
        with self.assertRaises(TaxonomyError):
            parse_ranks('s,x')
        with self.assertRaises(TaxonomyError):
            parse_ranks('o-')
        with self.assertRaises(TaxonomyError):
            parse_ranks('')

class TestLineageResolver(unittest.TestCase):

    def setUp(self):
        self.db = TaxonomyDB(NODES, NAMES, {'100': '562'})
        self.resolver = LineageResolver(self.db, DEFAULT)

    def test_resolve_taxid(self):
        self.assertEqual(self.resolver.resolve('562'), ECOLI)

    def test_resolve_below_species(self):
        self.assertEqual(self.resolver.resolve('83333'), ECOLI)

    def test_resolve_name(self):
        self.assertEqual(self.resolver.resolve('Escherichia coli'), ECOLI)

    def test_merged_taxid(self):
        self.assertEqual(self.resolver.resolve('100'), ECOLI)

    def test_null_keys_are_all_missing(self):
        for key in ('0', '1', '', '  '):
            for ranks in (DEFAULT, ['species'], parse_ranks('o-k')):
                resolver = LineageResolver(self.db, ranks, missing='-')
                self.assertEqual(resolver.resolve(key), ['-'] * len(ranks))

    def test_missing_rank_uses_sentinel(self):
        resolver = LineageResolver(self.db, ['subphylum', 'genus'])
        self.assertEqual(resolver.resolve('562'), ['NA', 'Escherichia'])

    def test_untranslatable_name_warns(self):
        with self.assertLogs('seqwrangle.core.taxonomy', level='WARNING'):
            self.assertEqual(self.resolver.resolve('Nonexistent taxon'), ['NA'] * len(DEFAULT))

    def test_unknown_taxid_warns(self):
        with self.assertLogs('seqwrangle.core.taxonomy', level='WARNING'):
            self.assertEqual(self.resolver.resolve('999999'), ['NA'] * len(DEFAULT))

    def test_output_modes(self):
        ids = LineageResolver(self.db, ['genus', 'species'], output='id')
        self.assertEqual(ids.resolve('562'), ['561', '562'])
        self.assertEqual(ids.header(), ['genus_taxid', 'species_taxid'])

        both = LineageResolver(self.db, ['genus', 'species group'], output='both')
        self.assertEqual(both.resolve('562'), ['561', 'Escherichia', 'NA', 'NA'])
        self.assertEqual(both.header(), ['genus_taxid', 'genus', 'species_group_taxid', 'species_group'])
        self.assertEqual(both.resolve('0'), ['NA'] * 4)

class TestAnnotateTable(unittest.TestCase):

    def setUp(self):
        self.resolver = LineageResolver(TaxonomyDB(NODES, NAMES), ['genus', 'species'])

    def test_header_comments_and_rows(self):
        lines = [
            '# generated by blast\n',
            'query\ttaxid\n',
            'q1\t562\n',
            '# mid-table comment\n',
            'q2\t0\n',
            'q3\tEscherichia\n',
        ]
        out = io.StringIO()
        rows = annotate_table(lines, out, self.resolver)
        self.assertEqual(rows, 3)
        self.assertEqual(out.getvalue().splitlines(), [
            '# generated by blast',
            'query\ttaxid\tgenus\tspecies',
            'q1\t562\tEscherichia\tEscherichia coli',
            '# mid-table comment',
            'q2\t0\tNA\tNA',
            'q3\tEscherichia\tEscherichia\tNA',
        ])

    def test_without_header(self):
        out = io.StringIO()
        annotate_table(['562\n'], out, self.resolver, header=False)
        self.assertEqual(out.getvalue(), '562\tEscherichia\tEscherichia coli\n')

    def test_empty_key(self):
        out = io.StringIO()
        annotate_table(['q1\t\n'], out, self.resolver, header=False)
        self.assertEqual(out.getvalue(), 'q1\t\tNA\tNA\n')

class TestTaxdump(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        with open(os.path.join(self.tmpdir, 'nodes.dmp'), 'w') as f:
            for taxid, (parent, rank) in NODES.items():
                rank = 'domain' if rank == 'superkingdom' else rank
                f.write(f"{taxid}\t|\t{parent}\t|\t{rank}\t|\t\t|\n")
        with open(os.path.join(self.tmpdir, 'names.dmp'), 'w') as f:
            for taxid, name in NAMES.items():
                f.write(f"{taxid}\t|\t{name}\t|\t\t|\tscientific name\t|\n")
            f.write("562\t|\tBacillus coli\t|\t\t|\tsynonym\t|\n")
        with open(os.path.join(self.tmpdir, 'merged.dmp'), 'w') as f:
            f.write("100\t|\t562\t|\n")

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def test_from_taxdump(self):
        db = TaxonomyDB.from_taxdump(self.tmpdir)
        self.assertEqual(db.names['562'], 'Escherichia coli')
        self.assertEqual(db.nodes['2'], ('1', 'superkingdom'))
        self.assertEqual(db.resolve_taxid('100'), '562')
        self.assertIsNone(db.translate_name('Bacillus coli'))
        self.assertEqual(LineageResolver(db, DEFAULT).resolve('562'), ECOLI)

    def test_missing_dump(self):
        os.remove(os.path.join(self.tmpdir, 'names.dmp'))
        with self.assertRaises(TaxonomyError):
            TaxonomyDB.from_taxdump(self.tmpdir)

if __name__ == '__main__':
    unittest.main()
